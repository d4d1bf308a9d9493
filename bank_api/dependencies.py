"""
Shared dependencies for the application.

Provides dependency injection functions used across routers.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .container import ServiceContainer
    from .services import (
        BankAccountService,
        BankBranchService,
        CustomerAccountService,
        CustomerService,
        TransactionService,
    )

# Global container instance (set by main app)
_container: Optional["ServiceContainer"] = None


def set_container(container: Optional["ServiceContainer"]) -> None:
    """
    Set the global service container.

    Called by the app lifespan during startup, and by tests.
    """
    global _container
    _container = container


def get_container() -> "ServiceContainer":
    if _container is None:
        raise RuntimeError("Service container not initialized")
    return _container


async def get_customer_service() -> "CustomerService":
    return get_container().customer_service


async def get_customer_account_service() -> "CustomerAccountService":
    return get_container().customer_account_service


async def get_bank_account_service() -> "BankAccountService":
    return get_container().bank_account_service


async def get_bank_branch_service() -> "BankBranchService":
    return get_container().bank_branch_service


async def get_transaction_service() -> "TransactionService":
    return get_container().transaction_service
