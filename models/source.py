"""Plain records for data fetched from Fintoc.

The SDK returns attribute-style resource objects; these dataclasses pin down
the handful of fields the sync actually reads.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


def _balance_value(balance: Any) -> Any:
    """Reduce a Fintoc balance to a single number.

    Fintoc reports balances as an object with available/current/limit
    figures; the current one is kept.
    """
    if balance is None:
        return 0
    if isinstance(balance, (int, float)):
        return balance
    if isinstance(balance, dict):
        return balance.get("current", 0) or 0
    return getattr(balance, "current", 0) or 0


@dataclass
class SourceAccount:
    """A Fintoc account together with the institution of its link."""

    id: str
    name: str
    type: str
    balance: Any
    currency: str
    institution_name: Optional[str] = None
    # SDK resource, needed to list movements
    resource: Any = field(default=None, repr=False, compare=False)

    @classmethod
    def from_resource(cls, account: Any, institution: Any = None) -> "SourceAccount":
        """Build from a fintoc SDK account resource and link institution."""
        institution_name = getattr(institution, "name", None)
        if isinstance(institution, dict):
            institution_name = institution.get("name")
        return cls(
            id=getattr(account, "id", "") or "",
            name=getattr(account, "name", "") or "",
            type=getattr(account, "type", "") or "",
            balance=_balance_value(getattr(account, "balance", None)),
            currency=getattr(account, "currency", "") or "",
            institution_name=institution_name,
            resource=account,
        )


@dataclass
class Movement:
    """A single Fintoc movement (transaction)."""

    id: Optional[str]
    post_date: Any  # str, date or datetime depending on the SDK version
    amount: Any  # decimal major units; may be missing or malformed
    description: Optional[str] = None

    @classmethod
    def from_resource(cls, movement: Any) -> "Movement":
        return cls(
            id=getattr(movement, "id", None),
            post_date=getattr(movement, "post_date", None),
            amount=getattr(movement, "amount", None),
            description=getattr(movement, "description", None),
        )
