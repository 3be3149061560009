"""Call context and per-operation atomicity.

Every public pool operation runs inside ``atomic(...)``: each participant
(pool ledger, LP token, asset ledgers) is snapshotted on entry and restored
if the operation raises, so no failure leaves partial effects behind.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from stableswap.constants import ZERO_ADDRESS
from stableswap.errors import ValidationError

logger = structlog.get_logger()


@dataclass(frozen=True)
class CallContext:
    """Who is calling and how much native value is attached to the call.

    Attributes:
        sender: Caller address
        value: Native value (raw units) supplied with the call
    """

    sender: str
    value: int = 0

    def __post_init__(self) -> None:
        if not self.sender or self.sender.lower() == ZERO_ADDRESS:
            raise ValidationError("Caller must not be the zero address")
        if self.value < 0:
            raise ValidationError(f"Attached value must be non-negative, got {self.value}")


class Snapshottable(Protocol):
    """Anything whose state can be captured and put back."""

    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...


@contextmanager
def atomic(participants: Iterable[Snapshottable], operation: str) -> Iterator[None]:
    """Run a block with all-or-nothing effects on ``participants``.

    Args:
        participants: Objects mutated by the block (duplicates are ignored)
        operation: Operation name for logging
    """
    seen: set[int] = set()
    snapshots: list[tuple[Snapshottable, Any]] = []
    for participant in participants:
        if id(participant) in seen:
            continue
        seen.add(id(participant))
        snapshots.append((participant, participant.snapshot()))

    try:
        yield
    except Exception as exc:
        for participant, snapshot in reversed(snapshots):
            participant.restore(snapshot)
        logger.info("operation_rolled_back", operation=operation, error=type(exc).__name__)
        raise
