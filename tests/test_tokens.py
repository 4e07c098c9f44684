# Tests for tokens.AccessToken and is_token_valid
# Created: 2026-10-18

import time

import pytest

from oauthflow.errors import MalformedTokenResponseError, TokenExchangeError
from oauthflow.tokens import DEFAULT_EXPIRES_IN, AccessToken, is_token_valid


def _token(created_at: float, expires_in: float = 3600) -> AccessToken:
    return AccessToken(
        token_type="bearer",
        scope="read",
        expires_in=expires_in,
        access_token="tok",
        created_at=created_at,
    )


class TestIsTokenValid:
    def test_absent(self):
        assert is_token_valid(None) is False

    def test_fresh(self):
        assert is_token_valid(_token(time.time())) is True

    def test_expired(self):
        assert is_token_valid(_token(time.time() - 7200)) is False

    def test_boundary_is_invalid(self):
        token = _token(1000.0, 60)
        assert is_token_valid(token, now=1059.999) is True
        assert is_token_valid(token, now=1060.0) is False

    def test_fractional_values(self):
        token = _token(1000.25, 0.5)
        assert is_token_valid(token, now=1000.5) is True
        assert is_token_valid(token, now=1000.75) is False

    def test_expires_at(self):
        assert _token(1000.0, 60).expires_at == 1060.0


class TestFromResponse:
    def test_defaults_expires_in(self):
        token = AccessToken.from_response(
            {"access_token": "tok", "token_type": "bearer", "scope": "read"}, now=50.0
        )
        assert token.expires_in == DEFAULT_EXPIRES_IN == 3600
        assert token.created_at == 50.0
        assert token.access_token == "tok"

    def test_created_at_not_trusted(self):
        before = time.time()
        token = AccessToken.from_response(
            {"access_token": "tok", "expires_in": 10, "created_at": 1}
        )
        assert token.created_at >= before

    def test_optional_fields_default(self):
        token = AccessToken.from_response({"access_token": "tok"})
        assert token.token_type == "bearer"
        assert token.scope == ""

    def test_numeric_string_expires_in(self):
        assert AccessToken.from_response({"access_token": "t", "expires_in": "120"}).expires_in == 120

    def test_null_expires_in_defaults(self):
        token = AccessToken.from_response({"access_token": "t", "expires_in": None})
        assert token.expires_in == 3600

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {},
            {"access_token": ""},
            {"access_token": 42},
            {"access_token": "t", "expires_in": "soon"},
            {"access_token": "t", "expires_in": True},
            {"access_token": "t", "expires_in": "Infinity"},
            {"access_token": "t", "expires_in": float("inf")},
            {"access_token": "t", "expires_in": "NaN"},
            {"access_token": "t", "expires_in": -1},
            {"access_token": "t", "expires_in": 10**400},
            {"access_token": "t", "scope": ["read"]},
        ],
    )
    def test_malformed(self, data):
        with pytest.raises(MalformedTokenResponseError):
            AccessToken.from_response(data)

    def test_malformed_is_exchange_error(self):
        with pytest.raises(TokenExchangeError, match="access_token is missing"):
            AccessToken.from_response({"token_type": "bearer"})


class TestSecrecy:
    def test_repr_masks_access_token(self):
        token = _token(0.0)
        assert "tok'" not in repr(token)
        assert "***" in repr(token)

    def test_dict_roundtrip_ignores_unknown(self):
        data = _token(12.5).to_dict()
        data["refresh_token"] = "ignored"
        assert AccessToken.from_dict(data) == _token(12.5)

    @pytest.mark.parametrize(
        "data",
        [
            ["bearer", "read"],
            "token",
            {"token_type": "bearer", "scope": "", "expires_in": 60, "access_token": "t"},
            {
                "token_type": "bearer",
                "scope": "",
                "expires_in": 60,
                "access_token": "t",
                "created_at": "x",
            },
            {
                "token_type": "bearer",
                "scope": "",
                "expires_in": True,
                "access_token": "t",
                "created_at": 0,
            },
            {
                "token_type": "bearer",
                "scope": None,
                "expires_in": 60,
                "access_token": "t",
                "created_at": 0,
            },
        ],
    )
    def test_from_dict_rejects_bad_records(self, data):
        with pytest.raises(ValueError):
            AccessToken.from_dict(data)
