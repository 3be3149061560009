"""In-memory asset ledgers.

These are the collaborators the pool moves value through: fungible tokens
(pull/push transfers), the chain's native currency (value attached to calls,
push-sends that run receiver hooks) and the LP-share token (pool is the sole
minter). Allowances and other token-standard plumbing are not modelled.

Every ledger supports snapshot()/restore() so a failed pool operation can be
rolled back across all of them.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from stableswap.constants import NATIVE_ASSET
from stableswap.errors import (
    AuthorizationError,
    InsufficientBalanceError,
    TransferError,
    ValidationError,
)

logger = structlog.get_logger()

# Receiver hook: called with (sender, amount) after native value arrives.
# Raising rejects the transfer.
ReceiverHook = Callable[[str, int], None]


class BalanceBook:
    """Account balances with checked debits."""

    def __init__(self, address: str) -> None:
        self.address = address.lower()
        self._balances: dict[str, int] = {}

    def balance_of(self, account: str) -> int:
        return self._balances.get(account.lower(), 0)

    def _credit(self, account: str, amount: int) -> None:
        key = account.lower()
        self._balances[key] = self._balances.get(key, 0) + amount

    def _debit(self, account: str, amount: int) -> None:
        balance = self.balance_of(account)
        if balance < amount:
            raise InsufficientBalanceError(
                f"Insufficient {self.address} balance for {account}: {balance} < {amount}"
            )
        self._balances[account.lower()] = balance - amount

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValidationError(f"Transfer amount must be non-negative, got {amount}")
        self._debit(sender, amount)
        self._credit(recipient, amount)

    def snapshot(self) -> dict[str, int]:
        return dict(self._balances)

    def restore(self, snapshot: dict[str, int]) -> None:
        self._balances = dict(snapshot)


class InMemoryToken(BalanceBook):
    """Fungible token ledger."""

    def mint(self, account: str, amount: int) -> None:
        """Credit ``amount`` to ``account`` out of thin air (funding helper)."""
        self._credit(account, amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move ``amount`` from sender to recipient.

        Raises:
            InsufficientBalanceError: If sender's balance is too small
        """
        self._move(sender, recipient, amount)


class NativeLedger(BalanceBook):
    """Ledger for the chain's native currency.

    Value sent to an account with a registered receiver hook runs the hook;
    a hook that raises rejects the transfer.
    """

    def __init__(self) -> None:
        super().__init__(NATIVE_ASSET)
        self._receivers: dict[str, ReceiverHook] = {}

    def fund(self, account: str, amount: int) -> None:
        self._credit(account, amount)

    def register_receiver(self, account: str, hook: ReceiverHook) -> None:
        self._receivers[account.lower()] = hook

    def send(self, sender: str, recipient: str, amount: int) -> None:
        """Push ``amount`` of native value to recipient.

        Raises:
            InsufficientBalanceError: If sender's balance is too small
            TransferError: If the recipient's hook rejects the transfer
        """
        self._move(sender, recipient, amount)
        hook = self._receivers.get(recipient.lower())
        if hook is None:
            return
        try:
            hook(sender, amount)
        except Exception as exc:
            self._move(recipient, sender, amount)
            logger.warning("native_transfer_rejected", recipient=recipient, amount=amount)
            raise TransferError(f"Native transfer to {recipient} rejected: {exc}") from exc


class LPShareToken(BalanceBook):
    """LP-share token. Only the registered minter may mint or burn."""

    def __init__(self, address: str, symbol: str = "SS-LP") -> None:
        super().__init__(address)
        self.symbol = symbol
        self.minter: str | None = None
        self.total_supply = 0

    def set_minter(self, minter: str) -> None:
        """Register the sole minter (once)."""
        if self.minter is not None:
            raise ValidationError(f"Minter already set to {self.minter}")
        self.minter = minter.lower()

    def _require_minter(self, caller: str) -> None:
        if self.minter is None or caller.lower() != self.minter:
            raise AuthorizationError(f"Account {caller} is not the minter of {self.address}")

    def mint(self, caller: str, to: str, amount: int) -> None:
        self._require_minter(caller)
        self._credit(to, amount)
        self.total_supply += amount

    def burn_from(self, caller: str, owner: str, amount: int) -> None:
        """Burn ``amount`` of owner's shares.

        Raises:
            AuthorizationError: If caller is not the minter
            InsufficientBalanceError: If owner holds fewer shares
        """
        self._require_minter(caller)
        self._debit(owner, amount)
        self.total_supply -= amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        self._move(sender, recipient, amount)

    def snapshot(self) -> tuple[dict[str, int], int]:  # type: ignore[override]
        return dict(self._balances), self.total_supply

    def restore(self, snapshot: tuple[dict[str, int], int]) -> None:  # type: ignore[override]
        balances, self.total_supply = snapshot
        self._balances = dict(balances)
