"""
HTTP client for the remote transaction API.

Endpoints used:
- ``GET  api/accounts/{accountId}/transactions[?startDate=&endDate=]``
- ``GET  api/transactions/{id}``
- ``POST api/transactions``

Request and response bodies use camelCase JSON. Every request runs under
the HTTP retry policy; a 404 response is reported as ``None``.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from ..domain.entities import Transaction
from ..domain.exceptions import DataAccessException, DataMappingException
from .retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.bankfinancial.com"
USER_AGENT = "BFB-Template-API"


def transaction_to_json(transaction: Transaction) -> Dict[str, Any]:
    """Convert a transaction to the API's JSON shape."""
    return {
        "id": transaction.id,
        "accountId": transaction.account_id,
        "transactionType": transaction.transaction_type,
        "amount": float(transaction.amount),
        "description": transaction.description,
        "timestamp": transaction.timestamp.isoformat() if transaction.timestamp else None,
        "balanceAfterTransaction": float(transaction.balance_after_transaction),
        "reference": transaction.reference,
    }


def transaction_from_json(data: Dict[str, Any]) -> Transaction:
    """
    Convert an API JSON object to a transaction.

    Raises:
        DataMappingException: If required fields are missing or malformed
    """
    try:
        timestamp = data.get("timestamp")
        return Transaction(
            id=int(data["id"]),
            account_id=int(data["accountId"]),
            transaction_type=data.get("transactionType") or "",
            amount=Decimal(str(data["amount"])),
            description=data.get("description"),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else None,
            balance_after_transaction=Decimal(str(data.get("balanceAfterTransaction") or 0)),
            reference=data.get("reference"),
        )
    except (KeyError, TypeError, ValueError, ArithmeticError) as e:
        raise DataMappingException("transaction", str(data)[:100], str(e)) from e


class TransactionApiClient:
    """
    Async client for the transaction API.

    Features:
    - Lazy ``httpx.AsyncClient`` with connection pooling
    - API key and user agent headers on every request
    - Retry with exponential backoff on transient failures
    - Per-request timeout plus the policy's overall timeout
    """

    def __init__(
        self,
        retry_policy: RetryPolicy,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str = "",
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize transaction API client.

        Args:
            retry_policy: Policy wrapping each request
            base_url: API root URL
            api_key: Value for the X-API-Key header
            timeout_seconds: Per-request timeout
            transport: Optional transport, e.g. an in-process mock
        """
        if not api_key:
            logger.warning("TRANSACTION_API_KEY not configured - requests are unauthenticated")
        self.retry_policy = retry_policy
        self.base_url = base_url.rstrip("/") + "/"
        self.api_key = api_key
        self.timeout = timeout_seconds
        self._transport = transport

        # HTTP client (lazy initialization)
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "X-API-Key": self.api_key,
                    "User-Agent": USER_AGENT,
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self):
        """Close HTTP client connections."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Optional[Any]:
        """
        Send a request and decode the JSON body.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            params: Query parameters
            json: JSON request body

        Returns:
            Decoded JSON, or None when the API answers 404

        Raises:
            StorageUnavailableException: Transient failures persisted past the policy
            DataAccessException: The API rejected the request (non-retryable status)
        """
        operation_name = f"{method} {path}"

        async def send() -> Optional[Any]:
            client = await self._get_client()
            response = await client.request(method, path, params=params, json=json)
            if response.status_code == 404:
                logger.debug(f"{operation_name} returned 404")
                return None
            response.raise_for_status()
            return response.json()

        try:
            return await self.retry_policy.execute(send, operation_name)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Transaction API rejected {operation_name}: HTTP {status}")
            raise DataAccessException(
                f"Transaction API returned HTTP {status} for {operation_name}",
                details={"status_code": status},
            ) from e
