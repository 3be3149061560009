"""Custody paths for token and native-currency asset slots.

Tokens are pulled from the caller; the native asset arrives as value attached
to the call and must match the declared amount exactly, because the native
asset has no approval step. Outbound native transfers are push-sends that
fail the whole operation if the receiver rejects them.
"""

from __future__ import annotations

from collections.abc import Sequence

from stableswap.constants import ZERO_ADDRESS
from stableswap.errors import ValidationError
from stableswap.execution import CallContext
from stableswap.ledgers import InMemoryToken, NativeLedger
from stableswap.state import Asset


class NativeAssetAdapter:
    """Moves assets between callers and the pool's custody."""

    def __init__(
        self,
        pool_address: str,
        assets: Sequence[Asset],
        tokens: dict[str, InMemoryToken],
        native: NativeLedger | None = None,
    ) -> None:
        self.pool_address = pool_address.lower()
        self.native_index: int | None = None
        self._ledgers: list[InMemoryToken | NativeLedger] = []

        for i, asset in enumerate(assets):
            if asset.is_native:
                if self.native_index is not None:
                    raise ValidationError("At most one asset slot may be native")
                if native is None:
                    raise ValidationError("Native asset slot requires a native ledger")
                self.native_index = i
                self._ledgers.append(native)
            else:
                ledger = tokens.get(asset.address)
                if ledger is None:
                    raise ValidationError(f"No ledger for asset {asset.address}")
                self._ledgers.append(ledger)

    @property
    def ledgers(self) -> list[InMemoryToken | NativeLedger]:
        return list(self._ledgers)

    def reject_value(self, ctx: CallContext) -> None:
        """Operations without inbound assets accept no attached value."""
        if ctx.value != 0:
            raise ValidationError(f"Operation does not accept native value, got {ctx.value}")

    def collect(self, ctx: CallContext, amounts: Sequence[int]) -> None:
        """Pull ``amounts`` from the caller into pool custody.

        Raises:
            ValidationError: If attached value differs from the native amount
            InsufficientBalanceError: If the caller cannot cover an amount
        """
        if len(amounts) != len(self._ledgers):
            raise ValidationError(f"Expected {len(self._ledgers)} amounts, got {len(amounts)}")
        expected_value = amounts[self.native_index] if self.native_index is not None else 0
        if ctx.value != expected_value:
            raise ValidationError(
                f"Attached native value {ctx.value} does not match declared amount {expected_value}"
            )
        for i, amount in enumerate(amounts):
            if amount == 0:
                continue
            ledger = self._ledgers[i]
            if isinstance(ledger, NativeLedger):
                ledger.send(ctx.sender, self.pool_address, amount)
            else:
                ledger.transfer(ctx.sender, self.pool_address, amount)

    def pay(self, recipient: str, i: int, amount: int) -> None:
        """Send ``amount`` of asset i out of pool custody.

        Raises:
            ValidationError: If recipient is the zero address
            TransferError: If a native receiver rejects the transfer
        """
        if recipient.lower() == ZERO_ADDRESS:
            raise ValidationError("Recipient must not be the zero address")
        if amount == 0:
            return
        ledger = self._ledgers[i]
        if isinstance(ledger, NativeLedger):
            ledger.send(self.pool_address, recipient, amount)
        else:
            ledger.transfer(self.pool_address, recipient, amount)

    def pay_all(self, recipient: str, amounts: Sequence[int]) -> None:
        for i, amount in enumerate(amounts):
            self.pay(recipient, i, amount)
