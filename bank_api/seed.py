"""
Development seed data.

Fills empty stores with a small, consistent sample: two bank accounts and
the three branches they (and a second bank) use.
"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import structlog

from .container import ServiceContainer
from .domain.entities import AccountType, BankAccount
from .repositories.in_memory_branch_repository import SAMPLE_BRANCHES

logger = structlog.get_logger(__name__)

SAMPLE_ACCOUNTS = (
    BankAccount(
        account_number="ACC-001",
        owner_name="John Doe",
        balance=Decimal("5000.00"),
        type=AccountType.CHECKING,
        bank_id=1,
        branch_id=1,
    ),
    BankAccount(
        account_number="ACC-002",
        owner_name="Jane Smith",
        balance=Decimal("15000.50"),
        type=AccountType.SAVINGS,
        bank_id=1,
        branch_id=2,
    ),
)


async def seed_development_data(container: ServiceContainer) -> None:
    """Seed branches and bank accounts when their stores are empty."""
    if not await container.branch_repo.get_all():
        for branch in SAMPLE_BRANCHES:
            await container.branch_repo.create(replace(branch, created_date=datetime.utcnow()))
        logger.info("Seeded sample branches", count=len(SAMPLE_BRANCHES))

    if not await container.bank_account_repo.get_all():
        for account in SAMPLE_ACCOUNTS:
            await container.bank_account_repo.create(
                replace(account, created_date=datetime.utcnow())
            )
        logger.info("Seeded sample bank accounts", count=len(SAMPLE_ACCOUNTS))
