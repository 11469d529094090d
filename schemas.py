"""View models handed back to the dashboard as plain JSON."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from errors import ErrorKind

Direction = Literal["debit", "credit"]


class Institution(BaseModel):
    institution_id: str
    name: str


class AccountSnapshot(BaseModel):
    """First account Plaid reports for an access token."""

    account_id: str
    available_balance: Optional[float] = None
    current_balance: float = 0.0
    name: str
    official_name: Optional[str] = None
    mask: Optional[str] = None
    type: str
    subtype: Optional[str] = None
    institution_id: Optional[str] = None


class Account(BaseModel):
    id: str
    available_balance: Optional[float] = None
    current_balance: float
    institution_id: Optional[str] = None
    name: str
    official_name: Optional[str] = None
    mask: Optional[str] = None
    type: str
    subtype: Optional[str] = None
    bank_link_id: str
    shareable_id: Optional[str] = None


class Transaction(BaseModel):
    id: str
    name: str
    amount: float
    date: datetime
    payment_channel: Optional[str] = None
    category: str = ""
    direction: Direction
    image: Optional[str] = None
    source: Literal["synced", "transfer"]
    account_id: Optional[str] = None
    pending: bool = False


class SyncResult(BaseModel):
    """Raw `added` entries from a /transactions/sync loop; error is set when it stopped early."""

    added: List[Dict[str, Any]] = Field(default_factory=list)
    cursor: Optional[str] = None
    error: Optional[str] = None

    @property
    def complete(self) -> bool:
        return self.error is None


class BankLinkError(BaseModel):
    bank_link_id: str
    kind: ErrorKind
    message: str


class AccountsSummary(BaseModel):
    accounts: List[Account]
    total_banks: int
    total_current_balance: float
    errors: List[BankLinkError] = Field(default_factory=list)


class AccountDetail(BaseModel):
    account: Account
    transactions: List[Transaction]
    duplicate_ids: List[str] = Field(default_factory=list)
    sync_error: Optional[str] = None


class CategoryCount(BaseModel):
    name: str
    count: int
    total_count: int


class DateTimeFormats(BaseModel):
    date_time: str
    date_day: str
    date_only: str
    time_only: str
