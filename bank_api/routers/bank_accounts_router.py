"""
Bank account endpoints.

Accounts returned here are enriched with the bank id of their branch.
"""

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from ..dependencies import get_bank_account_service
from ..services.bank_account_service import BankAccountService
from .common import ensure_matching_id
from .schemas import BankAccountRequest, BankAccountResponse, ErrorResponse

router = APIRouter(
    prefix="/api/bankaccounts",
    tags=["bank accounts"],
    responses={503: {"model": ErrorResponse, "description": "Storage unavailable"}},
)


@router.get("", response_model=List[BankAccountResponse], summary="List bank accounts")
async def get_bank_accounts(service: BankAccountService = Depends(get_bank_account_service)):
    return [BankAccountResponse.from_entity(a) for a in await service.get_all_accounts()]


@router.get(
    "/{account_id}",
    response_model=BankAccountResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get bank account by id",
)
async def get_bank_account(
    account_id: int, service: BankAccountService = Depends(get_bank_account_service)
):
    return BankAccountResponse.from_entity(await service.get_account_by_id(account_id))


@router.post(
    "",
    response_model=BankAccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Create bank account",
)
async def create_bank_account(
    body: BankAccountRequest,
    request: Request,
    response: Response,
    service: BankAccountService = Depends(get_bank_account_service),
):
    created = await service.create_account(body.to_entity())
    response.headers["Location"] = str(request.url_for("get_bank_account", account_id=created.id))
    return BankAccountResponse.from_entity(created)


@router.put(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Replace bank account",
)
async def update_bank_account(
    account_id: int,
    body: BankAccountRequest,
    service: BankAccountService = Depends(get_bank_account_service),
):
    ensure_matching_id(account_id, body.id, "account")
    await service.update_account(account_id, body.to_entity())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete bank account",
)
async def delete_bank_account(
    account_id: int, service: BankAccountService = Depends(get_bank_account_service)
):
    await service.delete_account(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
