import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, String, create_engine, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from config import get_settings
from errors import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)

# Database Setup
# Default to local SQLite, but allow override for a hosted Postgres
DB_URL = get_settings().database_url

engine = create_engine(DB_URL, connect_args={"check_same_thread": False} if "sqlite" in DB_URL else {})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)

# --- Models ---

class BankLink(Base):
    """A user's connection to one institution, created when linking completes."""

    __tablename__ = "bank_links"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String, index=True, nullable=False)
    access_token = Column(String, nullable=False)  # Plaid credential, never sent to clients
    item_id = Column(String, unique=True, index=True)
    shareable_id = Column(String, index=True)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<BankLink id={self.id} user_id={self.user_id}>"


class TransferRecord(Base):
    __tablename__ = "transfers"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    channel = Column(String, default="online")
    category = Column(String, default="Transfer")
    sender_bank_id = Column(String(36), index=True, nullable=False)
    receiver_bank_id = Column(String(36), index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)

# --- Read contracts ---

def get_banks(db: Session, user_id: str) -> list[BankLink]:
    try:
        return db.query(BankLink).filter(BankLink.user_id == user_id).order_by(BankLink.created_at).all()
    except SQLAlchemyError as exc:
        logger.error("Failed to load bank links for user %s: %s", user_id, exc)
        raise UpstreamError("Document store unavailable while loading bank links") from exc


def get_bank(db: Session, bank_link_id: str) -> BankLink:
    try:
        bank = db.query(BankLink).filter(BankLink.id == bank_link_id).first()
    except SQLAlchemyError as exc:
        logger.error("Failed to load bank link %s: %s", bank_link_id, exc)
        raise UpstreamError("Document store unavailable while loading bank link") from exc

    if bank is None:
        raise NotFoundError(f"Bank link {bank_link_id} does not exist")
    return bank


def list_transfers_for_bank(db: Session, bank_link_id: str) -> list[TransferRecord]:
    """
    Transfers where the bank is either the sender or the receiver.
    """
    try:
        return (
            db.query(TransferRecord)
            .filter(or_(TransferRecord.sender_bank_id == bank_link_id, TransferRecord.receiver_bank_id == bank_link_id))
            .order_by(TransferRecord.created_at)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to load transfers for bank %s: %s", bank_link_id, exc)
        raise UpstreamError("Document store unavailable while loading transfers") from exc

# --- Init DB ---
def init_db():
    Base.metadata.create_all(bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
