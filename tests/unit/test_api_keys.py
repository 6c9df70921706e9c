"""Unit tests for admin API key validation."""

import pytest
from fastapi import HTTPException

from menu_customization_service.auth.api_keys import (
    APIKeyValidator,
    parse_api_keys,
    require_api_key,
)


@pytest.mark.unit
class TestParseAPIKeys:
    """Test suite for parse_api_keys."""

    def test_splits_and_strips(self) -> None:
        assert parse_api_keys(" key-1, key-2 ,,") == ["key-1", "key-2"]

    @pytest.mark.parametrize("raw", [None, "", " , "])
    def test_empty(self, raw: str | None) -> None:
        assert parse_api_keys(raw) == []


@pytest.mark.unit
class TestAPIKeyValidator:
    """Test suite for APIKeyValidator."""

    def test_validates_membership(self) -> None:
        validator = APIKeyValidator(api_keys=["key-1", "key-2"])

        assert validator.validate("key-1") is True
        assert validator.validate("key-3") is False

    def test_requires_keys(self) -> None:
        with pytest.raises(ValueError, match="At least one API key"):
            APIKeyValidator(api_keys=[])


@pytest.mark.unit
class TestRequireAPIKey:
    """Test suite for require_api_key."""

    def test_accepts_valid_key(self) -> None:
        validator = APIKeyValidator(api_keys=["key-1"])

        assert require_api_key(validator, "key-1") == "key-1"

    def test_missing_key(self) -> None:
        validator = APIKeyValidator(api_keys=["key-1"])

        with pytest.raises(HTTPException) as exc_info:
            require_api_key(validator, None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Missing API key"

    def test_invalid_key(self) -> None:
        validator = APIKeyValidator(api_keys=["key-1"])

        with pytest.raises(HTTPException) as exc_info:
            require_api_key(validator, "wrong")

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid API key"
