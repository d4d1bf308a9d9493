"""
In-memory bank branch repository.

Used when the document store cannot be reached at startup and the
fallback is enabled. Data lives only for the lifetime of the process.
"""

import copy
import itertools
import logging
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..domain.entities import BankBranch
from .interfaces import IBankBranchRepository

logger = logging.getLogger(__name__)

SAMPLE_BRANCHES = (
    BankBranch(
        id=1,
        bank_id=1,
        branch_name="Downtown Branch",
        address="123 Main Street",
        city="New York",
        state="NY",
        zip_code="10001",
        phone_number="212-555-1234",
    ),
    BankBranch(
        id=2,
        bank_id=1,
        branch_name="Uptown Branch",
        address="456 Park Avenue",
        city="New York",
        state="NY",
        zip_code="10022",
        phone_number="212-555-5678",
    ),
    BankBranch(
        id=3,
        bank_id=2,
        branch_name="West Side Branch",
        address="789 Broadway",
        city="New York",
        state="NY",
        zip_code="10019",
        phone_number="212-555-9012",
    ),
)


class InMemoryBankBranchRepository(IBankBranchRepository):
    """Process-local branch store keyed by id."""

    def __init__(self, branches: Iterable[BankBranch] = ()):
        self._branches: Dict[int, BankBranch] = {}
        for branch in branches:
            created = branch.created_date or datetime.utcnow()
            self._branches[branch.id] = replace(branch, created_date=created)
        self._ids = itertools.count(max(self._branches, default=0) + 1)

    @classmethod
    def with_sample_data(cls) -> "InMemoryBankBranchRepository":
        return cls(SAMPLE_BRANCHES)

    async def get_all(self) -> List[BankBranch]:
        return [copy.deepcopy(self._branches[key]) for key in sorted(self._branches)]

    async def get_by_id(self, branch_id: int) -> Optional[BankBranch]:
        branch = self._branches.get(branch_id)
        return copy.deepcopy(branch) if branch else None

    async def get_by_bank_id(self, bank_id: int) -> List[BankBranch]:
        return [branch for branch in await self.get_all() if branch.bank_id == bank_id]

    async def create(self, branch: BankBranch) -> BankBranch:
        stored = replace(branch, id=next(self._ids))
        self._branches[stored.id] = stored
        logger.info(f"Created in-memory branch {stored.id}")
        return copy.deepcopy(stored)

    async def update(self, branch: BankBranch) -> bool:
        existing = self._branches.get(branch.id)
        if existing is None:
            return False
        self._branches[branch.id] = replace(branch, created_date=existing.created_date)
        return True

    async def delete(self, branch_id: int) -> bool:
        return self._branches.pop(branch_id, None) is not None
