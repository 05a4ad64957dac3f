"""
Funds ledger boundary.

Stakes arrive as value attached to a vote and leave only through refunds.
``transfer`` models a low-level value transfer: it reports failure by
returning False instead of raising.
"""

from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Tuple

from ..crypto import to_checksum_address
from ..logger import get_logger
from .errors import ValidationError

logger = get_logger(__name__)

ZERO = Decimal("0")


def to_amount(value) -> Decimal:
    """
    Coerce an amount to Decimal.

    Floats go through ``str`` so 0.001 stays 0.001. Booleans, NaN and
    infinities are rejected.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    return amount


class FundsLedger(ABC):
    """Value held by the governance contract."""

    @abstractmethod
    def receive(self, sender: str, amount: Decimal) -> None:
        """Credit value sent along with a call."""

    @abstractmethod
    def transfer(self, recipient: str, amount: Decimal) -> bool:
        """Send value out. Returns False on failure; never raises for it."""


class InMemoryFundsLedger(FundsLedger):
    """Escrow balance plus a record of every payout attempt."""

    def __init__(self, initial_balance: Decimal = ZERO):
        self.balance = to_amount(initial_balance)
        self.received: Dict[str, Decimal] = {}
        self.paid: Dict[str, Decimal] = {}
        self.failed: List[Tuple[str, Decimal]] = []

    def receive(self, sender: str, amount: Decimal) -> None:
        sender = to_checksum_address(sender)
        self.balance += amount
        self.received[sender] = self.received.get(sender, ZERO) + amount

    def transfer(self, recipient: str, amount: Decimal) -> bool:
        recipient = to_checksum_address(recipient)
        if amount > self.balance:
            logger.warning(f"Transfer of {amount} to {recipient} exceeds balance {self.balance}")
            self.failed.append((recipient, amount))
            return False
        self.balance -= amount
        self.paid[recipient] = self.paid.get(recipient, ZERO) + amount
        return True

    def paid_to(self, recipient: str) -> Decimal:
        return self.paid.get(to_checksum_address(recipient), ZERO)

    def __repr__(self) -> str:
        return f"<InMemoryFundsLedger balance={self.balance} payees={len(self.paid)}>"
