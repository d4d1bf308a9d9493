"""
Bank branch endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from ..dependencies import get_bank_branch_service
from ..services.bank_branch_service import BankBranchService
from .common import ensure_matching_id
from .schemas import BankBranchRequest, BankBranchResponse, ErrorResponse

router = APIRouter(
    prefix="/api/bankbranches",
    tags=["bank branches"],
    responses={503: {"model": ErrorResponse, "description": "Storage unavailable"}},
)


@router.get("", response_model=List[BankBranchResponse], summary="List branches")
async def get_branches(service: BankBranchService = Depends(get_bank_branch_service)):
    return [BankBranchResponse.from_entity(b) for b in await service.get_all_branches()]


@router.get(
    "/bank/{bank_id}",
    response_model=List[BankBranchResponse],
    summary="List branches of a bank",
)
async def get_branches_by_bank(
    bank_id: int, service: BankBranchService = Depends(get_bank_branch_service)
):
    return [BankBranchResponse.from_entity(b) for b in await service.get_branches_by_bank_id(bank_id)]


@router.get(
    "/{branch_id}",
    response_model=BankBranchResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get branch by id",
)
async def get_branch(branch_id: int, service: BankBranchService = Depends(get_bank_branch_service)):
    return BankBranchResponse.from_entity(await service.get_branch_by_id(branch_id))


@router.post(
    "",
    response_model=BankBranchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create branch",
)
async def create_branch(
    body: BankBranchRequest,
    request: Request,
    response: Response,
    service: BankBranchService = Depends(get_bank_branch_service),
):
    created = await service.create_branch(body.to_entity())
    response.headers["Location"] = str(request.url_for("get_branch", branch_id=created.id))
    return BankBranchResponse.from_entity(created)


@router.put(
    "/{branch_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Replace branch",
)
async def update_branch(
    branch_id: int,
    body: BankBranchRequest,
    service: BankBranchService = Depends(get_bank_branch_service),
):
    ensure_matching_id(branch_id, body.id, "branch")
    await service.update_branch(branch_id, body.to_entity())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{branch_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete branch",
)
async def delete_branch(branch_id: int, service: BankBranchService = Depends(get_bank_branch_service)):
    await service.delete_branch(branch_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
