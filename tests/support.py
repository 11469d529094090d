from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, BankLink, TransferRecord
from errors import NotFoundError
from schemas import AccountSnapshot, Institution, SyncResult


def make_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def add_bank(db, bank_id: str, user_id: str = "user-1", access_token: str | None = None, **fields) -> BankLink:
    bank = BankLink(
        id=bank_id,
        user_id=user_id,
        access_token=access_token or f"access-{bank_id}",
        item_id=f"item-{bank_id}",
        shareable_id=fields.pop("shareable_id", None),
        **fields,
    )
    db.add(bank)
    db.commit()
    return bank


def add_transfer(db, transfer_id: str, sender: str, receiver: str, created_at: datetime, amount: float = 25.0,
                 name: str = "Transfer", category: str = "Transfer") -> TransferRecord:
    record = TransferRecord(
        id=transfer_id,
        name=name,
        amount=amount,
        channel="online",
        category=category,
        sender_bank_id=sender,
        receiver_bank_id=receiver,
        created_at=created_at,
    )
    db.add(record)
    db.commit()
    return record


class FakeGateway:
    """Stands in for PlaidGateway, keyed by access token."""

    def __init__(self, balances=None, failures=None, synced=None, sync_error=None):
        self.balances = balances or {}
        self.failures = failures or {}
        self.synced = synced or {}
        self.sync_error = sync_error

    def fetch_account(self, access_token: str) -> AccountSnapshot:
        if access_token in self.failures:
            raise self.failures[access_token]
        return AccountSnapshot(
            account_id=f"acc-{access_token}",
            available_balance=self.balances.get(access_token, 0.0),
            current_balance=self.balances.get(access_token, 0.0),
            name="Checking",
            official_name="Everyday Checking",
            mask="1234",
            type="depository",
            subtype="checking",
            institution_id="ins_1",
        )

    def fetch_institution(self, institution_id: str) -> Institution:
        if institution_id != "ins_1":
            raise NotFoundError(f"Institution {institution_id} not found")
        return Institution(institution_id="ins_1", name="First Platypus Bank")

    def fetch_synced_transactions(self, access_token: str) -> SyncResult:
        return SyncResult(added=list(self.synced.get(access_token, [])), error=self.sync_error)
