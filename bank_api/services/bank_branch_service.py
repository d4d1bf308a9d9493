"""
Bank branch service.
"""

import logging
from datetime import datetime
from typing import List

from ..domain.entities import BankBranch
from ..domain.exceptions import ResourceNotFoundException
from ..repositories.interfaces import IBankBranchRepository
from .validation import require_text

logger = logging.getLogger(__name__)


class BankBranchService:
    """Branch operations over the document store."""

    def __init__(self, branch_repo: IBankBranchRepository):
        self.branch_repo = branch_repo

    async def get_all_branches(self) -> List[BankBranch]:
        return await self.branch_repo.get_all()

    async def get_branch_by_id(self, branch_id: int) -> BankBranch:
        branch = await self.branch_repo.get_by_id(branch_id)
        if branch is None:
            raise ResourceNotFoundException("Branch", branch_id)
        return branch

    async def get_branches_by_bank_id(self, bank_id: int) -> List[BankBranch]:
        return await self.branch_repo.get_by_bank_id(bank_id)

    async def create_branch(self, branch: BankBranch) -> BankBranch:
        require_text(branch.branch_name, "Branch name cannot be empty", "branchName")
        branch.created_date = datetime.utcnow()
        branch.is_active = True

        created = await self.branch_repo.create(branch)
        logger.info(f"Branch {created.id} created for bank {created.bank_id}")
        return created

    async def update_branch(self, branch_id: int, branch: BankBranch) -> None:
        require_text(branch.branch_name, "Branch name cannot be empty", "branchName")
        branch.id = branch_id
        if not await self.branch_repo.update(branch):
            raise ResourceNotFoundException("Branch", branch_id)

    async def delete_branch(self, branch_id: int) -> None:
        if not await self.branch_repo.delete(branch_id):
            raise ResourceNotFoundException("Branch", branch_id)
