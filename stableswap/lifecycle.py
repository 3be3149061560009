"""Pool lifecycle: roles, pause gate, parameter updates and the A ramp.

State machine is two-state ({Active, Paused}) and transitions are immediate.
The amplification coefficient is a pure function of time, so ramps need no
background task: the current value is interpolated whenever it is read.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from stableswap.constants import (
    MAX_A,
    MAX_A_CHANGE,
    MAX_ADMIN_FEE,
    MAX_FEE,
    MIN_RAMP_TIME,
    N_COINS,
    THRESHOLD_SCALE,
)
from stableswap.errors import AuthorizationError, PausedError, ValidationError

if TYPE_CHECKING:
    from stableswap.state import PoolState

logger = structlog.get_logger()


class Role(str, Enum):
    """Capabilities that gate pool administration."""

    ADMIN = "admin"  # role grants, oracle, admin fee withdrawal
    MANAGER = "manager"  # fees, thresholds, amplification ramp
    PAUSER = "pauser"  # pause gate


@dataclass(frozen=True)
class AmplificationRamp:
    """Linear amplification ramp between two timestamps.

    Attributes:
        initial: A at ramp_start
        future: A at ramp_end and afterwards
        ramp_start: Ramp start timestamp (seconds)
        ramp_end: Ramp end timestamp (seconds)
    """

    initial: int
    future: int
    ramp_start: int = 0
    ramp_end: int = 0

    @classmethod
    def constant(cls, amp: int) -> AmplificationRamp:
        """A fixed amplification coefficient with no ramp scheduled."""
        _validate_amp(amp)
        return cls(initial=amp, future=amp)

    def value_at(self, now: int) -> int:
        """Interpolated A at timestamp ``now``, clamped to the ramp window."""
        if now >= self.ramp_end or self.ramp_end <= self.ramp_start:
            return self.future
        if now <= self.ramp_start:
            return self.initial
        elapsed = now - self.ramp_start
        duration = self.ramp_end - self.ramp_start
        if self.future > self.initial:
            return self.initial + (self.future - self.initial) * elapsed // duration
        return self.initial - (self.initial - self.future) * elapsed // duration

    def ramp_to(self, now: int, future: int, ramp_end: int) -> AmplificationRamp:
        """Schedule a ramp from the current value towards ``future``.

        Raises:
            ValidationError: If the previous ramp started less than
                MIN_RAMP_TIME ago, the ramp is shorter than MIN_RAMP_TIME,
                future is out of (0, MAX_A) or the change exceeds MAX_A_CHANGE
        """
        if now < self.ramp_start + MIN_RAMP_TIME:
            raise ValidationError("Amplification ramp started too recently")
        if ramp_end < now + MIN_RAMP_TIME:
            raise ValidationError("Amplification ramp must last at least MIN_RAMP_TIME")
        _validate_amp(future)

        current = self.value_at(now)
        if future >= current:
            if future > current * MAX_A_CHANGE:
                raise ValidationError(f"Amplification increase too large: {current} -> {future}")
        elif future * MAX_A_CHANGE < current:
            raise ValidationError(f"Amplification decrease too large: {current} -> {future}")

        return AmplificationRamp(initial=current, future=future, ramp_start=now, ramp_end=ramp_end)

    def stop(self, now: int) -> AmplificationRamp:
        """Freeze A at its current value."""
        current = self.value_at(now)
        return AmplificationRamp(initial=current, future=current, ramp_start=now, ramp_end=now)


def _validate_amp(amp: int) -> None:
    if not 0 < amp < MAX_A:
        raise ValidationError(f"Amplification must be between 0 and {MAX_A}, got {amp}")


def validate_fees(fee: int, admin_fee: int) -> None:
    """Check fee fractions against protocol maximums.

    Raises:
        ValidationError: If either fraction is out of bounds
    """
    if not 0 <= fee <= MAX_FEE:
        raise ValidationError(f"Swap fee must be in [0, {MAX_FEE}], got {fee}")
    if not 0 <= admin_fee <= MAX_ADMIN_FEE:
        raise ValidationError(f"Admin fee must be in [0, {MAX_ADMIN_FEE}], got {admin_fee}")


def validate_thresholds(thresholds: list[int]) -> None:
    """Check per-asset deviation thresholds (1e18 scale)."""
    if len(thresholds) != N_COINS:
        raise ValidationError(f"Expected {N_COINS} price thresholds, got {len(thresholds)}")
    for i, threshold in enumerate(thresholds):
        if not 0 < threshold <= THRESHOLD_SCALE:
            raise ValidationError(
                f"Price threshold {i} must be in (0, {THRESHOLD_SCALE}], got {threshold}"
            )


class AccessControl:
    """Capability sets for {ADMIN, MANAGER, PAUSER}."""

    def __init__(self, admin: str, manager: str, pauser: str) -> None:
        self._members: dict[Role, set[str]] = {
            Role.ADMIN: {admin.lower()},
            Role.MANAGER: {manager.lower()},
            Role.PAUSER: {pauser.lower()},
        }

    def has_role(self, role: Role, account: str) -> bool:
        return account.lower() in self._members[role]

    def require(self, role: Role, account: str) -> None:
        """Raise AuthorizationError unless account holds role."""
        if not self.has_role(role, account):
            raise AuthorizationError(f"Account {account} is missing role {role.value}")

    def grant(self, role: Role, account: str) -> None:
        self._members[role].add(account.lower())

    def revoke(self, role: Role, account: str) -> None:
        members = self._members[role]
        if role is Role.ADMIN and members == {account.lower()}:
            raise ValidationError("Cannot revoke the last admin")
        members.discard(account.lower())

    def members(self, role: Role) -> frozenset[str]:
        return frozenset(self._members[role])

    def snapshot(self) -> dict[Role, set[str]]:
        return {role: set(accounts) for role, accounts in self._members.items()}

    def restore(self, snapshot: dict[Role, set[str]]) -> None:
        self._members = snapshot


class LifecycleController:
    """Role checks, pause gate and parameter updates on a PoolState."""

    def __init__(self, state: PoolState, access: AccessControl, clock: Callable[[], int]) -> None:
        self.state = state
        self.access = access
        self.clock = clock

    def current_a(self) -> int:
        """Effective amplification coefficient now."""
        return self.state.amplification.value_at(self.clock())

    def require_active(self, operation: str) -> None:
        """Raise PausedError if the pool is paused."""
        if self.state.paused:
            raise PausedError(f"Operation {operation} is not allowed while the pool is paused")

    def pause(self, sender: str) -> None:
        self.access.require(Role.PAUSER, sender)
        self.state.paused = True
        logger.info("pool_paused", sender=sender)

    def unpause(self, sender: str) -> None:
        self.access.require(Role.PAUSER, sender)
        self.state.paused = False
        logger.info("pool_unpaused", sender=sender)

    def set_fee(self, sender: str, fee: int, admin_fee: int) -> None:
        self.access.require(Role.MANAGER, sender)
        validate_fees(fee, admin_fee)
        self.state.fee = fee
        self.state.admin_fee = admin_fee
        logger.info("fee_updated", sender=sender, fee=fee, admin_fee=admin_fee)

    def set_price_thresholds(self, sender: str, thresholds: list[int]) -> None:
        self.access.require(Role.MANAGER, sender)
        validate_thresholds(thresholds)
        self.state.price_thresholds = list(thresholds)
        logger.info("price_thresholds_updated", sender=sender, thresholds=thresholds)

    def ramp_a(self, sender: str, future: int, ramp_end: int) -> None:
        self.access.require(Role.MANAGER, sender)
        now = self.clock()
        self.state.amplification = self.state.amplification.ramp_to(now, future, ramp_end)
        logger.info(
            "ramp_a",
            sender=sender,
            initial=self.state.amplification.initial,
            future=future,
            ramp_end=ramp_end,
        )

    def stop_ramp_a(self, sender: str) -> None:
        self.access.require(Role.MANAGER, sender)
        self.state.amplification = self.state.amplification.stop(self.clock())
        logger.info("stop_ramp_a", sender=sender, amplification=self.state.amplification.future)

    def grant_role(self, sender: str, role: Role, account: str) -> None:
        self.access.require(Role.ADMIN, sender)
        self.access.grant(role, account)
        logger.info("role_granted", sender=sender, role=role.value, account=account)

    def revoke_role(self, sender: str, role: Role, account: str) -> None:
        self.access.require(Role.ADMIN, sender)
        self.access.revoke(role, account)
        logger.info("role_revoked", sender=sender, role=role.value, account=account)
