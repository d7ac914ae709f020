"""Balance operations on users' wallets."""

from __future__ import annotations

from decimal import Decimal


class WalletError(ValueError):
    """A wallet operation was refused or failed."""


def _as_decimal(amount) -> Decimal:
    return amount if isinstance(amount, Decimal) else Decimal(str(amount))


class WalletService:
    """Reads and changes wallet balances through a persister."""

    def __init__(self, persister):
        self.persister = persister

    def _wallet(self, asset, user_id):
        try:
            return self.persister.get_wallet(user_id, asset)
        except Exception as exc:
            raise WalletError(f"Failed to retrieve balance: {exc}") from exc

    def get_balance(self, asset, user_id) -> Decimal:
        """Available balance, zero when the user has no wallet for the asset."""
        wallet = self._wallet(asset, user_id)
        return wallet.available if wallet is not None else Decimal(0)

    def get_frozen_balance(self, asset, user_id) -> Decimal:
        """Locked balance, zero when the user has no wallet for the asset."""
        wallet = self._wallet(asset, user_id)
        return wallet.locked if wallet is not None else Decimal(0)

    def _change(self, operation, asset, amount, user_id, refusal, failure):
        amount = _as_decimal(amount)
        if amount <= 0:
            raise WalletError(refusal)
        try:
            return operation(user_id, asset, amount)
        except Exception as exc:
            raise WalletError(f"{failure}: {exc}") from exc

    def deposit(self, asset, amount, user_id):
        """Add a positive amount to the available balance."""
        return self._change(
            self.persister.deposit_balance, asset, amount, user_id,
            "Cannot add non-positive balance", "Failed to add balance",
        )

    def lock_balance(self, asset, amount, user_id):
        """Move a positive amount from available to locked."""
        return self._change(
            self.persister.lock_balance, asset, amount, user_id,
            "Cannot freeze non-positive balance", "Failed to freeze balance",
        )

    def unlock_balance(self, asset, amount, user_id):
        """Move a positive amount from locked back to available."""
        return self._change(
            self.persister.unlock_balance, asset, amount, user_id,
            "Cannot unfreeze non-positive balance", "Failed to unfreeze balance",
        )

    def withdraw(self, asset, amount, user_id):
        """Take a positive amount from the available balance."""
        return self._change(
            self.persister.withdraw_balance, asset, amount, user_id,
            "Cannot withdraw non-positive amount", "Failed to withdraw balance",
        )