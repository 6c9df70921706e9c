"""API key authentication for admin menu builder endpoints.

Admin keys come from configuration as a comma-separated list and are checked
with simple set membership.
"""

from typing import Annotated

from fastapi import Header, HTTPException


def parse_api_keys(raw: str | None) -> list[str]:
    """Split a comma-separated key list, dropping blanks.

    Args:
        raw: Value of the ADMIN_API_KEY setting

    Returns:
        list: Non-empty, stripped keys
    """
    if not raw:
        return []
    return [key.strip() for key in raw.split(",") if key.strip()]


class APIKeyValidator:
    """Validates admin API keys against a configured set."""

    def __init__(self, api_keys: list[str]) -> None:
        """Initialize validator with the accepted keys.

        Raises:
            ValueError: If no keys are provided
        """
        if not api_keys:
            raise ValueError("At least one API key must be provided")

        self.api_keys = frozenset(api_keys)

    def validate(self, api_key: str) -> bool:
        return api_key in self.api_keys


def require_api_key(
    validator: APIKeyValidator,
    x_api_key: Annotated[str | None, Header()] = None,
) -> str:
    """Check the X-API-Key header against a validator.

    Args:
        validator: Validator holding the accepted keys
        x_api_key: Value of the X-API-Key header

    Returns:
        str: The accepted key

    Raises:
        HTTPException: 401 if the key is missing or not accepted
    """
    if not x_api_key:
        raise HTTPException(status_code=401, detail="Missing API key")

    if not validator.validate(x_api_key):
        raise HTTPException(status_code=401, detail="Invalid API key")

    return x_api_key
