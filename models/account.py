from dataclasses import dataclass
from typing import Any, List, Optional

from models.source import SourceAccount

# Fintoc account type -> Actual account type
ACCOUNT_TYPE_MAP = {
    "checking_account": "checking",
    "sight_account": "checking",
    "savings_account": "savings",
    "line_of_credit": "credit",
    "credit_card": "credit",
}
DEFAULT_ACCOUNT_TYPE = "other"


def get_actual_account_type(fintoc_type: Optional[str]) -> str:
    """Map a Fintoc account type to an Actual account type, 'other' if unknown."""
    return ACCOUNT_TYPE_MAP.get(fintoc_type or "", DEFAULT_ACCOUNT_TYPE)


@dataclass
class Account:
    """An account known to both Fintoc and (once created) Actual.

    source_id is the only identity that is stable across runs; actual_id is
    assigned when the account is created in Actual.
    """

    source_id: str
    name: str
    type: str  # Fintoc type, e.g. "checking_account"
    balance: Any
    currency: str
    institution_name: str = "Unknown"
    actual_id: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.institution_name} - {self.name}"

    @property
    def actual_account_type(self) -> str:
        return get_actual_account_type(self.type)

    def to_actual_format(self) -> dict:
        """Account data used to create the account in Actual."""
        return {"name": self.display_name, "type": self.actual_account_type}

    def to_dict(self) -> dict:
        """Convert account to the record stored in the mapping file."""
        return {
            "fintocId": self.source_id,
            "name": self.name,
            "type": self.type,
            "balance": self.balance,
            "currency": self.currency,
            "actualId": self.actual_id,
            "institutionName": self.institution_name,
        }

    @classmethod
    def from_source(cls, source: SourceAccount, actual_id: Optional[str] = None) -> "Account":
        """Normalize a Fintoc account and its institution."""
        return cls(
            source_id=source.id,
            name=source.name,
            type=source.type,
            balance=source.balance if source.balance is not None else 0,
            currency=source.currency,
            institution_name=source.institution_name or "Unknown",
            actual_id=actual_id,
        )

    @classmethod
    def from_record(cls, record: dict, source_accounts: List[SourceAccount]) -> "Account":
        """Rebuild a persisted account, preferring fresh Fintoc data.

        If Fintoc still returns an account with the recorded id, the account
        is rebuilt from it and keeps the recorded actual_id. Otherwise the
        stored snapshot is used as-is, so accounts that were unlinked in
        Fintoc remain loadable.

        Args:
            record: A mapping-file account record (camelCase keys).
            source_accounts: All accounts fetched from Fintoc in this run.
        """
        source_id = record.get("fintocId")
        actual_id = record.get("actualId")

        for source in source_accounts:
            if source.id == source_id:
                return cls.from_source(source, actual_id=actual_id)

        return cls(
            source_id=source_id,
            name=record.get("name") or "",
            type=record.get("type") or "",
            balance=record.get("balance") or 0,
            currency=record.get("currency") or "",
            institution_name=record.get("institutionName") or "Unknown",
            actual_id=actual_id,
        )
