"""Schema of the persisted account mapping file."""

from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class AccountRecord(BaseModel):
    """One account entry: Fintoc identity plus its Actual id."""

    model_config = ConfigDict(populate_by_name=True)

    fintoc_id: str = Field(alias="fintocId", min_length=1)
    name: str = ""
    type: str = ""
    balance: Union[int, float, None] = 0
    currency: str = ""
    actual_id: Optional[str] = Field(default=None, alias="actualId")
    institution_name: str = Field(default="Unknown", alias="institutionName")


class MappingDocument(BaseModel):
    """The whole mapping file."""

    model_config = ConfigDict(populate_by_name=True)

    budget_name: Optional[str] = Field(default=None, alias="budgetName")
    accounts: List[AccountRecord] = Field(default_factory=list)
