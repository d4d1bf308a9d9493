"""
Customer endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from ..dependencies import get_customer_service
from ..services.customer_service import CustomerService
from .common import ensure_matching_id
from .schemas import CustomerRequest, CustomerResponse, ErrorResponse

router = APIRouter(
    prefix="/api/customers",
    tags=["customers"],
    responses={503: {"model": ErrorResponse, "description": "Storage unavailable"}},
)


@router.get("", response_model=List[CustomerResponse], summary="List customers")
async def get_customers(service: CustomerService = Depends(get_customer_service)):
    return [CustomerResponse.from_entity(c) for c in await service.get_all_customers()]


@router.get(
    "/{customer_id}",
    response_model=CustomerResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get customer by id",
)
async def get_customer(customer_id: int, service: CustomerService = Depends(get_customer_service)):
    return CustomerResponse.from_entity(await service.get_customer_by_id(customer_id))


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create customer",
)
async def create_customer(
    body: CustomerRequest,
    request: Request,
    response: Response,
    service: CustomerService = Depends(get_customer_service),
):
    created = await service.create_customer(body.to_entity())
    response.headers["Location"] = str(request.url_for("get_customer", customer_id=created.id))
    return CustomerResponse.from_entity(created)


@router.put(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Replace customer",
)
async def update_customer(
    customer_id: int,
    body: CustomerRequest,
    service: CustomerService = Depends(get_customer_service),
):
    ensure_matching_id(customer_id, body.id, "customer")
    await service.update_customer(customer_id, body.to_entity())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete customer",
)
async def delete_customer(
    customer_id: int, service: CustomerService = Depends(get_customer_service)
):
    await service.delete_customer(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
