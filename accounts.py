import asyncio
import logging
from typing import Optional

from sqlalchemy.orm import Session

from database import BankLink, get_bank, get_banks, list_transfers_for_bank
from errors import FinanceDataError
from plaid_integration import PlaidGateway, get_gateway
from schemas import Account, AccountDetail, AccountsSummary, AccountSnapshot, BankLinkError, Institution
from transactions import build_transaction_feed

logger = logging.getLogger(__name__)


def to_account(snapshot: AccountSnapshot, institution: Optional[Institution], bank: BankLink) -> Account:
    return Account(
        id=snapshot.account_id,
        available_balance=snapshot.available_balance,
        current_balance=snapshot.current_balance,
        institution_id=institution.institution_id if institution else snapshot.institution_id,
        name=snapshot.name,
        official_name=snapshot.official_name,
        mask=snapshot.mask,
        type=snapshot.type,
        subtype=snapshot.subtype,
        bank_link_id=bank.id,
        shareable_id=bank.shareable_id,
    )


async def resolve_account(gateway: PlaidGateway, bank: BankLink) -> Account:
    """Live account snapshot plus institution metadata for one bank link."""
    snapshot = await asyncio.to_thread(gateway.fetch_account, bank.access_token)

    institution = None
    if snapshot.institution_id:
        institution = await asyncio.to_thread(gateway.fetch_institution, snapshot.institution_id)
    else:
        logger.debug("Bank link %s has no institution id on its item", bank.id)

    return to_account(snapshot, institution, bank)


async def list_accounts(
    db: Session,
    user_id: str,
    gateway: Optional[PlaidGateway] = None,
    strict: bool = False,
) -> AccountsSummary:
    """
    Resolve every bank link the user owns, all at once.

    Each bank link succeeds or fails on its own: failures are reported in
    ``errors`` and left out of the totals. With ``strict=True`` the first
    failure is raised instead and no summary is returned.
    """
    gateway = gateway or get_gateway()
    banks = get_banks(db, user_id)

    results = await asyncio.gather(
        *(resolve_account(gateway, bank) for bank in banks),
        return_exceptions=True,
    )

    accounts = []
    failures = []
    for bank, result in zip(banks, results):
        if isinstance(result, FinanceDataError):
            logger.warning("Could not resolve bank link %s: %s", bank.id, result)
            failures.append((bank, result))
        elif isinstance(result, BaseException):
            raise result
        else:
            accounts.append(result)

    if strict and failures:
        raise failures[0][1]

    return AccountsSummary(
        accounts=accounts,
        total_banks=len(accounts),
        total_current_balance=sum(account.current_balance for account in accounts),
        errors=[
            BankLinkError(bank_link_id=bank.id, kind=exc.kind, message=exc.message)
            for bank, exc in failures
        ],
    )


async def get_account_detail(
    db: Session,
    bank_link_id: str,
    gateway: Optional[PlaidGateway] = None,
) -> AccountDetail:
    """
    One bank link's account with its synced and transfer transactions
    merged newest first. Sync failures only shorten the feed and are
    reported in ``sync_error``; everything else raises.
    """
    gateway = gateway or get_gateway()
    bank = get_bank(db, bank_link_id)
    transfer_records = list_transfers_for_bank(db, bank.id)

    account, sync_result = await asyncio.gather(
        resolve_account(gateway, bank),
        asyncio.to_thread(gateway.fetch_synced_transactions, bank.access_token),
    )

    feed, duplicates = build_transaction_feed(bank.id, sync_result.added, transfer_records)
    return AccountDetail(
        account=account,
        transactions=feed,
        duplicate_ids=duplicates,
        sync_error=sync_result.error,
    )
