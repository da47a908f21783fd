"""Export pipeline for the positions document.

Tiers are tried in order until one reports ``SAVED``. A tier that is not
available, or that fails, hands over to the next one; a tier is never
attempted twice for one ``save()`` call. A user cancelling the native dialog
stops the pipeline so the document does not silently end up on the clipboard.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence

from overlay_positions.position_store import PositionStore, dump_positions

_LOGGER = logging.getLogger("OverlayPositions.Persistence")

SAVE_FAILED_MESSAGE = "Could not save positions; see the log for details."
SAVE_CANCELLED_MESSAGE = "Save cancelled."


class SaveStatus(Enum):
    SAVED = "saved"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SaveOutcome:
    status: SaveStatus
    tier: str
    message: str = ""
    detail: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is SaveStatus.SAVED

    @classmethod
    def saved(cls, tier: str, message: str, detail: str = "") -> "SaveOutcome":
        return cls(SaveStatus.SAVED, tier, message, detail)

    @classmethod
    def unavailable(cls, tier: str, detail: str = "") -> "SaveOutcome":
        return cls(SaveStatus.UNAVAILABLE, tier, "", detail)

    @classmethod
    def failed(cls, tier: str, detail: str = "") -> "SaveOutcome":
        return cls(SaveStatus.FAILED, tier, "", detail)

    @classmethod
    def cancelled(cls, tier: str, detail: str = "") -> "SaveOutcome":
        return cls(SaveStatus.CANCELLED, tier, SAVE_CANCELLED_MESSAGE, detail)


class SaveTier(Protocol):
    name: str

    def is_available(self) -> bool:
        ...

    def commit(self, document: str) -> SaveOutcome:
        ...


@dataclass(frozen=True)
class SaveReport:
    outcome: SaveOutcome
    attempts: tuple[SaveOutcome, ...]


class PersistencePipeline:
    """Serializes the store and commits it through an ordered list of tiers."""

    def __init__(
        self,
        tiers: Sequence[SaveTier],
        *,
        notify: Optional[Callable[[SaveOutcome], None]] = None,
    ) -> None:
        self._tiers = list(tiers)
        self._notify = notify

    @property
    def tiers(self) -> List[SaveTier]:
        return list(self._tiers)

    def save(self, store: Optional[PositionStore]) -> Optional[SaveReport]:
        if store is None:
            _LOGGER.warning("No positions to save")
            return None
        document = dump_positions(store)
        attempts: List[SaveOutcome] = []
        final: Optional[SaveOutcome] = None
        for tier in self._tiers:
            outcome = self._attempt(tier, document)
            attempts.append(outcome)
            if outcome.status in (SaveStatus.SAVED, SaveStatus.CANCELLED):
                final = outcome
                break
        if final is None:
            _LOGGER.error(
                "Failed to save positions; tried %s",
                ", ".join(f"{attempt.tier}={attempt.status.value}" for attempt in attempts) or "no tiers",
            )
            last_tier = attempts[-1].tier if attempts else "none"
            final = SaveOutcome(SaveStatus.FAILED, last_tier, SAVE_FAILED_MESSAGE)
        elif final.succeeded:
            _LOGGER.info("Positions exported via %s%s", final.tier, f" ({final.detail})" if final.detail else "")
        else:
            _LOGGER.info("Positions export cancelled in %s", final.tier)
        self._dispatch(final)
        return SaveReport(final, tuple(attempts))

    def _attempt(self, tier: SaveTier, document: str) -> SaveOutcome:
        name = getattr(tier, "name", type(tier).__name__)
        try:
            if not tier.is_available():
                _LOGGER.debug("Save tier %s unavailable", name)
                return SaveOutcome.unavailable(name)
            outcome = tier.commit(document)
        except Exception as exc:
            _LOGGER.warning("Save tier %s failed: %s", name, exc)
            _LOGGER.debug("Save tier %s traceback", name, exc_info=True)
            return SaveOutcome.failed(name, str(exc))
        if outcome.status is SaveStatus.FAILED:
            _LOGGER.warning("Save tier %s failed: %s", name, outcome.detail or "no detail")
        return outcome

    def _dispatch(self, outcome: SaveOutcome) -> None:
        if self._notify is None:
            return
        try:
            self._notify(outcome)
        except Exception:
            _LOGGER.debug("Save notification failed", exc_info=True)
