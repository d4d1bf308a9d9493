"""
Customer account endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from ..dependencies import get_customer_account_service
from ..services.customer_account_service import CustomerAccountService
from .common import ensure_matching_id
from .schemas import CustomerAccountRequest, CustomerAccountResponse, ErrorResponse

router = APIRouter(
    prefix="/api/customeraccounts",
    tags=["customer accounts"],
    responses={503: {"model": ErrorResponse, "description": "Storage unavailable"}},
)


@router.get("", response_model=List[CustomerAccountResponse], summary="List customer accounts")
async def get_customer_accounts(
    service: CustomerAccountService = Depends(get_customer_account_service),
):
    return [CustomerAccountResponse.from_entity(a) for a in await service.get_all_accounts()]


@router.get(
    "/customer/{customer_id}",
    response_model=List[CustomerAccountResponse],
    responses={404: {"model": ErrorResponse}},
    summary="List accounts of a customer",
)
async def get_customer_accounts_by_customer(
    customer_id: int,
    service: CustomerAccountService = Depends(get_customer_account_service),
):
    accounts = await service.get_accounts_by_customer_id(customer_id)
    return [CustomerAccountResponse.from_entity(a) for a in accounts]


@router.get(
    "/{account_id}",
    response_model=CustomerAccountResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get customer account by id",
)
async def get_customer_account(
    account_id: int,
    service: CustomerAccountService = Depends(get_customer_account_service),
):
    return CustomerAccountResponse.from_entity(await service.get_account_by_id(account_id))


@router.post(
    "",
    response_model=CustomerAccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Create customer account",
)
async def create_customer_account(
    body: CustomerAccountRequest,
    request: Request,
    response: Response,
    service: CustomerAccountService = Depends(get_customer_account_service),
):
    created = await service.create_account(body.to_entity())
    response.headers["Location"] = str(
        request.url_for("get_customer_account", account_id=created.id)
    )
    return CustomerAccountResponse.from_entity(created)


@router.put(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Replace customer account",
)
async def update_customer_account(
    account_id: int,
    body: CustomerAccountRequest,
    service: CustomerAccountService = Depends(get_customer_account_service),
):
    ensure_matching_id(account_id, body.id, "account")
    await service.update_account(account_id, body.to_entity())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete customer account",
)
async def delete_customer_account(
    account_id: int,
    service: CustomerAccountService = Depends(get_customer_account_service),
):
    await service.delete_account(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
