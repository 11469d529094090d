"""
Merges Plaid-synced transactions with internally recorded transfers into
one feed, newest first.
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List

from formatting import parse_timestamp
from schemas import Transaction

logger = logging.getLogger(__name__)

SYNCED_DIRECTION = "debit"


def _first_category(raw: Dict[str, Any]) -> str:
    category_list = raw.get("category") or []
    if category_list:
        return category_list[0]
    pf_category = raw.get("personal_finance_category") or {}
    return pf_category.get("primary") or ""


def normalize_synced(raw: Dict[str, Any]) -> Transaction:
    """A /transactions/sync `added` entry in the common shape."""
    channel = raw.get("payment_channel")
    return Transaction(
        id=raw["transaction_id"],
        name=raw.get("name") or raw.get("merchant_name") or "",
        amount=raw.get("amount") or 0.0,
        date=parse_timestamp(raw["date"]),
        payment_channel=getattr(channel, "value", channel),
        category=_first_category(raw),
        direction=SYNCED_DIRECTION,
        image=raw.get("logo_url"),
        source="synced",
        account_id=raw.get("account_id"),
        pending=bool(raw.get("pending", False)),
    )


def normalize_transfer(record, bank_link_id: str) -> Transaction:
    """
    A stored transfer in the common shape. It is a debit for the bank that
    sent it and a credit for everyone else.
    """
    return Transaction(
        id=record.id,
        name=record.name or "",
        amount=record.amount or 0.0,
        date=parse_timestamp(record.created_at),
        payment_channel=record.channel,
        category=record.category or "",
        direction="debit" if record.sender_bank_id == bank_link_id else "credit",
        source="transfer",
    )


def sort_newest_first(transactions: Iterable[Transaction]) -> List[Transaction]:
    return sorted(transactions, key=lambda txn: txn.date.timestamp(), reverse=True)


def merge_transactions(synced: List[Transaction], transfers: List[Transaction]) -> List[Transaction]:
    """
    Synced entries followed by transfers, sorted by date descending.
    Nothing is dropped, so equal dates keep that concatenation order.
    """
    return sort_newest_first([*synced, *transfers])


def find_duplicate_ids(transactions: Iterable[Transaction]) -> List[str]:
    counts = Counter(txn.id for txn in transactions)
    return [txn_id for txn_id, count in counts.items() if count > 1]


def build_transaction_feed(bank_link_id: str, synced_raw: List[Dict[str, Any]], transfer_records: list):
    """
    Normalize both sources for one bank link and merge them.
    Returns the sorted feed and any ids that appear more than once.
    """
    synced = [normalize_synced(raw) for raw in synced_raw]
    transfers = [normalize_transfer(record, bank_link_id) for record in transfer_records]
    feed = merge_transactions(synced, transfers)

    duplicates = find_duplicate_ids(feed)
    if duplicates:
        logger.warning("Bank link %s feed repeats %d transaction ids: %s",
                       bank_link_id, len(duplicates), ", ".join(duplicates))
    return feed, duplicates
