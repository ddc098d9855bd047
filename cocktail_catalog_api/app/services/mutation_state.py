"""
Per-affordance submission state.

Every mutation moves through ``IDLE -> SUBMITTING -> SUCCESS | FAILED``
for the control that issued it.  An affordance is identified by the
action name, the ids it targets and the acting user, e.g.
``set_rating:42:user-1``.  While an affordance is submitting, a second
submission through it is rejected with ``DuplicateSubmissionError``;
other affordances are not affected.  The outcome of the last
submission (and, for failures, its message) is kept so a view can
render it; the affordance itself is idle again as soon as the call
finishes.  Nothing is retried automatically.

Outcomes are kept for the most recently used affordances only
(``max_outcomes``); older ones are forgotten and read as idle with no
message.
"""

import enum
import logging
from collections import OrderedDict
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Set

from ..core.exceptions import CatalogError, DuplicateSubmissionError

logger = logging.getLogger(__name__)


class MutationState(str, enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class MutationOutcome:
    state: MutationState
    message: Optional[str] = None


def affordance_key(action: str, *parts: object) -> str:
    """Build the key identifying one control issuing one kind of mutation."""
    return ":".join([action, *("-" if part is None else str(part) for part in parts)])


class MutationTracker:
    """Tracks in-flight submissions and the last outcome per affordance."""

    def __init__(self, max_outcomes: int = 1024) -> None:
        self.max_outcomes = max_outcomes
        self._in_flight: Set[str] = set()
        self._outcomes: "OrderedDict[str, MutationOutcome]" = OrderedDict()

    def _record(self, key: str, outcome: MutationOutcome) -> None:
        self._outcomes[key] = outcome
        self._outcomes.move_to_end(key)
        while len(self._outcomes) > self.max_outcomes:
            self._outcomes.popitem(last=False)

    def state(self, key: str) -> MutationState:
        return MutationState.SUBMITTING if key in self._in_flight else MutationState.IDLE

    def last_outcome(self, key: str) -> Optional[MutationOutcome]:
        return self._outcomes.get(key)

    def failure_message(self, key: str) -> Optional[str]:
        outcome = self._outcomes.get(key)
        if outcome is None or outcome.state is not MutationState.FAILED:
            return None
        return outcome.message

    @asynccontextmanager
    async def submit(self, key: str) -> AsyncIterator[None]:
        """Run the body as the submission of ``key``.

        Check and claim happen without an ``await`` in between, so two
        tasks on the same event loop cannot both get past the check.
        """
        if key in self._in_flight:
            logger.warning("Rejected duplicate submission for %s", key)
            raise DuplicateSubmissionError(key.split(":", 1)[0])
        self._in_flight.add(key)
        try:
            yield
        except CatalogError as exc:
            self._record(key, MutationOutcome(MutationState.FAILED, exc.message))
            raise
        except Exception as exc:
            self._record(key, MutationOutcome(MutationState.FAILED, str(exc) or exc.__class__.__name__))
            raise
        else:
            self._record(key, MutationOutcome(MutationState.SUCCESS))
        finally:
            self._in_flight.discard(key)
