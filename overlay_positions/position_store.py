"""In-memory store of per-element placement descriptors."""
from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from overlay_positions.descriptors import (
    PositionDescriptor,
    descriptor_from_dict,
    descriptor_to_dict,
)

_LOGGER = logging.getLogger("OverlayPositions.Store")

StoredDescriptor = Union[PositionDescriptor, Dict[str, Any]]
Location = Tuple[str, str]


class PositionDocumentError(ValueError):
    """Raised when a positions document does not have the panel/element shape."""


class PositionStore:
    """Mapping of panel id -> element id -> descriptor.

    The store does not care which descriptor shape an element uses; it keeps
    whatever was written last and hands it back on ``get``.
    """

    def __init__(self) -> None:
        self._panels: Dict[str, Dict[str, StoredDescriptor]] = {}

    def get(self, panel_id: str, element_id: str) -> Optional[StoredDescriptor]:
        bucket = self._panels.get(panel_id)
        if bucket is None:
            return None
        return bucket.get(element_id)

    def get_or_default(self, panel_id: str, element_id: str, default: StoredDescriptor) -> StoredDescriptor:
        stored = self.get(panel_id, element_id)
        return default if stored is None else stored

    def set(self, panel_id: str, element_id: str, descriptor: StoredDescriptor) -> None:
        self._panels.setdefault(panel_id, {})[element_id] = descriptor

    def panels(self) -> Iterable[str]:
        return self._panels.keys()

    def items(self) -> Iterable[Tuple[Location, StoredDescriptor]]:
        for panel_id, bucket in self._panels.items():
            for element_id, descriptor in bucket.items():
                yield (panel_id, element_id), descriptor

    def __contains__(self, location: object) -> bool:
        if not isinstance(location, tuple) or len(location) != 2:
            return False
        return self.get(location[0], location[1]) is not None

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._panels.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PositionStore):
            return NotImplemented
        return self._panels == other._panels

    def serialize(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """Return a deep snapshot of the store in its JSON document form."""
        return {
            panel_id: {element_id: copy.deepcopy(descriptor_to_dict(descriptor)) for element_id, descriptor in bucket.items()}
            for panel_id, bucket in self._panels.items()
        }

    def replace(self, other: "PositionStore") -> None:
        self._panels = {panel_id: dict(bucket) for panel_id, bucket in other._panels.items()}

    @classmethod
    def from_document(cls, document: Any) -> "PositionStore":
        if not isinstance(document, Mapping):
            raise PositionDocumentError(f"positions document must be an object, got {type(document).__name__}")
        store = cls()
        for panel_id, bucket in document.items():
            if not isinstance(bucket, Mapping):
                raise PositionDocumentError(f"panel '{panel_id}' must map element ids to descriptors")
            # Keep empty panel buckets so a save reproduces them.
            store._panels.setdefault(str(panel_id), {})
            for element_id, raw in bucket.items():
                if not isinstance(raw, Mapping):
                    raise PositionDocumentError(f"descriptor for '{panel_id}/{element_id}' must be an object")
                store.set(str(panel_id), str(element_id), descriptor_from_dict(raw))
        return store

    def load(self, document: Any) -> Optional["PositionStore"]:
        """Replace the store contents from a parsed document.

        Returns None (leaving the current contents untouched) when the
        document is malformed; callers fall back to their built-in defaults.
        """
        try:
            loaded = PositionStore.from_document(document)
        except PositionDocumentError as exc:
            _LOGGER.warning("Ignoring malformed positions document: %s", exc)
            return None
        self.replace(loaded)
        return self


def parse_positions(text: str) -> Optional[PositionStore]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        _LOGGER.warning("Failed to parse positions document: %s", exc)
        return None
    return PositionStore().load(document)


def load_positions(path: Path) -> Optional[PositionStore]:
    """Read a positions document from disk; None when it is missing or unreadable."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        _LOGGER.warning("Positions file %s not found; using built-in defaults", path)
        return None
    except OSError as exc:
        _LOGGER.warning("Failed to load positions from %s: %s", path, exc)
        return None
    store = parse_positions(raw)
    if store is not None:
        _LOGGER.info("Positions loaded from %s (%d elements)", path, len(store))
    return store


def dump_positions(store: PositionStore) -> str:
    """Serialize the store as the pretty-printed export document."""
    return json.dumps(store.serialize(), indent=2)
