"""Helpers shared by the resource routers."""

from typing import Optional

from ..domain.exceptions import BusinessValidationException


def ensure_matching_id(route_id: int, body_id: Optional[int], resource: str) -> None:
    """Reject a PUT whose body carries a different id than the route."""
    if body_id is not None and body_id != route_id:
        raise BusinessValidationException(
            f"ID in route does not match ID in {resource} object", field="id"
        )
