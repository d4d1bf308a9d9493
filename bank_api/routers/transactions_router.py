"""
Transaction endpoints.

Transactions are append-only: there is no update or delete.
"""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query, Request, Response, status

from ..dependencies import get_transaction_service
from ..services.transaction_service import TransactionService
from .schemas import ErrorResponse, TransactionRequest, TransactionResponse

router = APIRouter(
    prefix="/api/transactions",
    tags=["transactions"],
    responses={503: {"model": ErrorResponse, "description": "Transaction API unavailable"}},
)


@router.get(
    "",
    response_model=List[TransactionResponse],
    responses={404: {"model": ErrorResponse}},
    summary="List transactions of an account",
)
async def get_transactions(
    account_id: int = Query(..., alias="accountId", gt=0),
    service: TransactionService = Depends(get_transaction_service),
):
    transactions = await service.get_transactions_by_account_id(account_id)
    return [TransactionResponse.from_entity(t) for t in transactions]


@router.get(
    "/account/{account_id}",
    response_model=List[TransactionResponse],
    responses={404: {"model": ErrorResponse}},
    summary="List transactions of an account",
)
async def get_transactions_by_account(
    account_id: int, service: TransactionService = Depends(get_transaction_service)
):
    transactions = await service.get_transactions_by_account_id(account_id)
    return [TransactionResponse.from_entity(t) for t in transactions]


@router.get(
    "/account/{account_id}/date-range",
    response_model=List[TransactionResponse],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="List transactions of an account between two dates",
)
async def get_transactions_by_date_range(
    account_id: int,
    start_date: date = Query(..., alias="startDate", examples=["2024-01-01"]),
    end_date: date = Query(..., alias="endDate", examples=["2024-01-31"]),
    service: TransactionService = Depends(get_transaction_service),
):
    transactions = await service.get_transactions_by_date_range(account_id, start_date, end_date)
    return [TransactionResponse.from_entity(t) for t in transactions]


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get transaction by id",
)
async def get_transaction(
    transaction_id: int, service: TransactionService = Depends(get_transaction_service)
):
    return TransactionResponse.from_entity(await service.get_transaction_by_id(transaction_id))


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Record a transaction and update the account balance",
)
async def create_transaction(
    body: TransactionRequest,
    request: Request,
    response: Response,
    service: TransactionService = Depends(get_transaction_service),
):
    created = await service.create_transaction(body.to_entity())
    response.headers["Location"] = str(
        request.url_for("get_transaction", transaction_id=created.id)
    )
    return TransactionResponse.from_entity(created)
