"""FastAPI surface that hands account views to the dashboard as JSON."""

import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from accounts import get_account_detail, list_accounts
from database import get_db, init_db
from errors import ErrorKind, FinanceDataError
from formatting import count_transaction_categories, decrypt_id
from logging_config import setup_logging
from plaid_integration import PlaidGateway, get_gateway
from schemas import AccountDetail, AccountsSummary, CategoryCount

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UPSTREAM: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    yield


app = FastAPI(title="Finance Dashboard API", version="0.1.0", lifespan=lifespan)


def get_plaid_gateway() -> PlaidGateway:
    return get_gateway()


@app.exception_handler(FinanceDataError)
async def finance_error_handler(request: Request, exc: FinanceDataError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.kind, 500),
        content={"detail": exc.message, "kind": exc.kind.value},
    )


@app.get("/users/{user_id}/accounts", response_model=AccountsSummary)
async def user_accounts(
    user_id: str,
    strict: bool = False,
    db: Session = Depends(get_db),
    gateway: PlaidGateway = Depends(get_plaid_gateway),
):
    return await list_accounts(db, user_id, gateway=gateway, strict=strict)


@app.get("/accounts/{bank_link_id}", response_model=AccountDetail)
async def account_detail(
    bank_link_id: str,
    db: Session = Depends(get_db),
    gateway: PlaidGateway = Depends(get_plaid_gateway),
):
    return await get_account_detail(db, bank_link_id, gateway=gateway)


@app.get("/shared/{shareable}", response_model=AccountDetail)
async def shared_account_detail(
    shareable: str,
    db: Session = Depends(get_db),
    gateway: PlaidGateway = Depends(get_plaid_gateway),
):
    try:
        bank_link_id = decrypt_id(shareable)
    except ValueError:
        raise HTTPException(status_code=404, detail="Unknown shared account")
    return await get_account_detail(db, bank_link_id, gateway=gateway)


@app.get("/accounts/{bank_link_id}/categories", response_model=List[CategoryCount])
async def account_categories(
    bank_link_id: str,
    db: Session = Depends(get_db),
    gateway: PlaidGateway = Depends(get_plaid_gateway),
):
    detail = await get_account_detail(db, bank_link_id, gateway=gateway)
    return count_transaction_categories(detail.transactions)


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api_server:app", host="0.0.0.0", port=8001, reload=True)
