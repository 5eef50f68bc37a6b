import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from dateutil import parser as date_parser

from models.source import Movement


def to_minor_units(amount: Any) -> int:
    """Scale a major-unit amount to integer minor units (x100).

    The sign is preserved. Anything that isn't a finite number (None,
    strings, booleans, NaN) converts to 0.
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        return 0
    if isinstance(amount, float) and not math.isfinite(amount):
        return 0
    if isinstance(amount, Decimal) and not amount.is_finite():
        return 0
    scaled = Decimal(str(amount)) * 100
    return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def parse_post_date(value: Any) -> Optional[date]:
    """Normalize a Fintoc post_date (ISO string, date or datetime) to a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.isoparse(str(value)).date()
    except (ValueError, OverflowError):
        return None


@dataclass
class ActualTransaction:
    """A transaction ready to be sent to Actual."""

    account: str
    date: Optional[date]
    amount: int  # minor units, signed
    imported_payee: str
    imported_id: str  # Fintoc movement id, used by Actual to deduplicate
    notes: str

    @classmethod
    def from_movement(cls, account_id: str, movement: Movement) -> "ActualTransaction":
        description = str(movement.description or "")
        return cls(
            account=account_id,
            date=parse_post_date(movement.post_date),
            amount=to_minor_units(movement.amount),
            imported_payee=description,
            imported_id=movement.id or "",
            notes=description,
        )

    def to_dict(self) -> dict:
        return {
            "account": self.account,
            "date": self.date.isoformat() if self.date else None,
            "amount": self.amount,
            "imported_payee": self.imported_payee,
            "imported_id": self.imported_id,
            "notes": self.notes,
        }
