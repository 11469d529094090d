import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import plaid
from plaid.api import plaid_api
from plaid.exceptions import ApiException, OpenApiException
from plaid.model.accounts_get_request import AccountsGetRequest
from plaid.model.country_code import CountryCode
from plaid.model.institutions_get_by_id_request import InstitutionsGetByIdRequest
from plaid.model.item_get_request import ItemGetRequest
from plaid.model.transactions_sync_request import TransactionsSyncRequest
from urllib3.exceptions import HTTPError

from config import Settings, get_settings
from errors import FinanceDataError, NotFoundError, UpstreamError
from schemas import AccountSnapshot, Institution, SyncResult

logger = logging.getLogger(__name__)

# Plaid error codes that mean "no such thing" rather than "Plaid is unhappy"
NOT_FOUND_CODES = {"INVALID_INSTITUTION", "INSTITUTION_NOT_FOUND"}

# --- Canned data for development without Plaid credentials ---
MOCK_TRANSACTIONS = [
    {"transaction_id": "txn_001", "name": "Starbucks", "amount": 4.5, "date": "2025-05-15",
     "category": ["Food", "Coffee"], "merchant_name": "Starbucks", "payment_channel": "in store"},
    {"transaction_id": "txn_002", "name": "Amazon", "amount": 89.99, "date": "2025-05-14",
     "category": ["Shopping", "Online"], "merchant_name": "Amazon", "payment_channel": "online"},
    {"transaction_id": "txn_003", "name": "Uber", "amount": 15.75, "date": "2025-05-13",
     "category": ["Transport"], "merchant_name": "Uber", "payment_channel": "online"},
    {"transaction_id": "txn_004", "name": "Zara", "amount": 749.99, "date": "2025-05-13",
     "category": ["Shopping", "Clothing"], "merchant_name": "Zara", "payment_channel": "in store"},
    {"transaction_id": "txn_005", "name": "Netflix", "amount": 15.99, "date": "2025-05-12",
     "category": ["Entertainment"], "merchant_name": "Netflix", "payment_channel": "online"},
    {"transaction_id": "txn_006", "name": "Spotify", "amount": 9.99, "date": "2025-05-11",
     "category": ["Entertainment"], "merchant_name": "Spotify", "payment_channel": "online"},
    {"transaction_id": "txn_007", "name": "Whole Foods", "amount": 45.67, "date": "2025-05-10",
     "category": ["Groceries"], "merchant_name": "Whole Foods", "payment_channel": "in store"},
]

MOCK_ACCOUNT = {
    "account_id": "mock_acc_checking",
    "balances": {"available": 1100.0, "current": 1250.36},
    "name": "Plaid Checking",
    "official_name": "Plaid Gold Standard 0% Interest Checking",
    "mask": "0000",
    "type": "depository",
    "subtype": "checking",
}

MOCK_INSTITUTION = {"institution_id": "ins_109508", "name": "First Platypus Bank"}

# --- Plaid Client Setup ---
PLAID_HOSTS = {
    "sandbox": plaid.Environment.Sandbox,
    "development": getattr(plaid.Environment, "Development", plaid.Environment.Sandbox),
    "production": plaid.Environment.Production,
}


def build_client(settings: Settings) -> Optional[plaid_api.PlaidApi]:
    if not settings.has_plaid_credentials:
        # Callers get an UpstreamError instead of an import-time crash
        return None

    configuration = plaid.Configuration(
        host=PLAID_HOSTS[settings.plaid_env],
        api_key={
            'clientId': settings.plaid_client_id,
            'secret': settings.plaid_secret,
        }
    )
    api_client = plaid.ApiClient(configuration)
    return plaid_api.PlaidApi(api_client)


def _as_dict(response) -> Dict[str, Any]:
    return response.to_dict() if hasattr(response, "to_dict") else response


def _enum_value(value) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return str(getattr(value, "value", value))


def _translate(exc: Exception, action: str) -> FinanceDataError:
    if isinstance(exc, ApiException):
        code = None
        message = exc.reason or "Plaid request failed"
        try:
            body = json.loads(exc.body) if exc.body else {}
            code = body.get("error_code")
            message = body.get("error_message") or message
        except (TypeError, ValueError):
            pass
        if code in NOT_FOUND_CODES:
            return NotFoundError(f"{action}: {message}", code=code)
        return UpstreamError(f"{action}: {message}", code=code)
    if isinstance(exc, HTTPError):
        return UpstreamError(f"{action}: Plaid is unreachable ({exc})")
    # SDK-side failures, e.g. a response value the client models do not accept
    return UpstreamError(f"{action}: unexpected Plaid response ({exc})")


@dataclass
class PlaidGateway:
    """
    Stateless wrapper around the Plaid endpoints the dashboard reads from.
    Every call translates Plaid failures into UpstreamError / NotFoundError.
    """

    client: Any = None
    country_codes: tuple = ("US",)
    use_mock_data: bool = False
    page_size: int = 100

    def _require_client(self):
        if self.client is None:
            raise UpstreamError("Plaid credentials not set in .env")
        return self.client

    def _call(self, action: str, method: str, build_request) -> Dict[str, Any]:
        """Build the request and send it; the SDK validates in both steps."""
        client = self._require_client()
        try:
            return _as_dict(getattr(client, method)(build_request()))
        except (OpenApiException, HTTPError) as exc:
            error = _translate(exc, action)
            logger.error("Plaid %s failed (%s): %s", method, error.code or error.kind.value, error.message)
            raise error from exc

    def fetch_account(self, access_token: str) -> AccountSnapshot:
        """
        Returns the primary (first) account for a linked item together
        with the item's institution id.
        """
        if self.use_mock_data:
            response = {"accounts": [MOCK_ACCOUNT], "item": {"institution_id": MOCK_INSTITUTION["institution_id"]}}
        else:
            response = self._call("get accounts", "accounts_get", lambda: AccountsGetRequest(access_token=access_token))

        accounts = response.get("accounts") or []
        if not accounts:
            raise NotFoundError("Plaid returned no accounts for this item")
        data = accounts[0]
        balances = data.get("balances") or {}

        institution_id = (response.get("item") or {}).get("institution_id")
        if not institution_id:
            item = self._call("get item", "item_get", lambda: ItemGetRequest(access_token=access_token))
            institution_id = (item.get("item") or {}).get("institution_id")

        return AccountSnapshot(
            account_id=data["account_id"],
            available_balance=balances.get("available"),
            current_balance=balances.get("current") or 0.0,
            name=data.get("name") or "",
            official_name=data.get("official_name"),
            mask=data.get("mask"),
            type=_enum_value(data.get("type")) or "other",
            subtype=_enum_value(data.get("subtype")),
            institution_id=institution_id,
        )

    def fetch_institution(self, institution_id: str) -> Institution:
        if self.use_mock_data:
            return Institution(**MOCK_INSTITUTION)

        def build_request():
            return InstitutionsGetByIdRequest(
                institution_id=institution_id,
                country_codes=[CountryCode(code) for code in self.country_codes],
            )

        response = self._call("get institution", "institutions_get_by_id", build_request)
        institution = response.get("institution")
        if not institution:
            raise NotFoundError(f"Institution {institution_id} not found")
        return Institution(institution_id=institution["institution_id"], name=institution.get("name") or "")

    def _sync_page(self, access_token: str, cursor: Optional[str]) -> Dict[str, Any]:
        # Prepare arguments, omitting cursor if it is None
        kwargs = {
            'access_token': access_token,
            'count': self.page_size,
        }
        if cursor:
            kwargs['cursor'] = cursor
        return self._call("sync transactions", "transactions_sync", lambda: TransactionsSyncRequest(**kwargs))

    def fetch_synced_transactions(self, access_token: str) -> SyncResult:
        """
        Walks /transactions/sync from the start until has_more is false.

        Best effort: if a page fails, the pages already read are returned
        with ``error`` set instead of raising. Pages must be fetched in order
        since each cursor comes from the previous response.
        """
        if self.use_mock_data:
            return SyncResult(added=[dict(txn) for txn in MOCK_TRANSACTIONS])

        added = []
        cursor = None
        has_more = True
        try:
            while has_more:
                page = self._sync_page(access_token, cursor)
                added.extend(page.get("added") or [])
                cursor = page.get("next_cursor", cursor)
                has_more = bool(page.get("has_more", False))
        except FinanceDataError as exc:
            logger.warning("Transaction sync stopped early after %d transactions: %s", len(added), exc)
            return SyncResult(added=added, cursor=cursor, error=str(exc))

        return SyncResult(added=added, cursor=cursor)


def get_gateway(settings: Optional[Settings] = None) -> PlaidGateway:
    settings = settings or get_settings()
    return PlaidGateway(
        client=None if settings.use_mock_data else build_client(settings),
        country_codes=settings.plaid_country_codes,
        use_mock_data=settings.use_mock_data,
    )
