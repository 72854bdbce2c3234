"""
Unit Tests - Shared-secret authorizer
"""
import pytest

from src.expense_api.auth import SharedSecretAuthorizer


class TestSharedSecretAuthorizer:

    @pytest.fixture
    def authorizer(self):
        return SharedSecretAuthorizer("s3cret")

    @pytest.mark.unit
    @pytest.mark.parametrize("credential", ["s3cret", "Bearer s3cret", "bearer s3cret", " s3cret "])
    def test_accepts_secret(self, authorizer, credential):
        assert authorizer.check(credential) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("credential", [None, "", "token", "Bearer", "Bearer wrong", "S3CRET"])
    def test_rejects_everything_else(self, authorizer, credential):
        assert authorizer.check(credential) is False

    @pytest.mark.unit
    def test_empty_secret_not_allowed(self):
        with pytest.raises(ValueError):
            SharedSecretAuthorizer("")
