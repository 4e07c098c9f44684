# Access token record and validity check.
# Created: 2026-10-18

from __future__ import annotations

import math
import time
from dataclasses import asdict, dataclass, fields
from typing import Any

from oauthflow.errors import MalformedTokenResponseError

# RFC 6749 §4.2.2: expires_in is optional; assume one hour when omitted.
DEFAULT_EXPIRES_IN = 3600


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


@dataclass(frozen=True)
class AccessToken:
    """Access token as persisted by a token store.

    ``expires_in`` and ``created_at`` are seconds and may be fractional.
    ``created_at`` is stamped locally at exchange time.
    """

    token_type: str
    scope: str
    expires_in: float
    access_token: str
    created_at: float

    def __repr__(self) -> str:
        return (
            f"AccessToken(token_type={self.token_type!r}, scope={self.scope!r}, "
            f"expires_in={self.expires_in!r}, access_token='***', "
            f"created_at={self.created_at!r})"
        )

    @property
    def expires_at(self) -> float:
        return self.created_at + self.expires_in

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> AccessToken:
        """Rebuild a stored record.

        Raises:
            ValueError: *data* is not a complete record with the right types.
        """
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        names = {f.name for f in fields(cls)}
        missing = sorted(names - data.keys())
        if missing:
            raise ValueError(f"missing {', '.join(missing)}")
        for key in ("token_type", "scope", "access_token"):
            if not isinstance(data[key], str):
                raise ValueError(f"{key} is not a string")
        for key in ("expires_in", "created_at"):
            if not _is_number(data[key]):
                raise ValueError(f"{key} is not a number")
        return cls(**{k: v for k, v in data.items() if k in names})

    @classmethod
    def from_response(cls, data: Any, now: float | None = None) -> AccessToken:
        """Build a record from a token endpoint JSON body.

        Raises:
            MalformedTokenResponseError: ``access_token`` is missing or a
                field has the wrong type.
        """
        if not isinstance(data, dict):
            raise MalformedTokenResponseError("expected a JSON object")

        access_token = data.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise MalformedTokenResponseError("access_token is missing")

        expires_in = data.get("expires_in")
        if expires_in is None:
            expires_in = DEFAULT_EXPIRES_IN
        if isinstance(expires_in, bool):
            raise MalformedTokenResponseError("expires_in is not a number")
        try:
            expires_in = float(expires_in)
        except (TypeError, ValueError, OverflowError):
            raise MalformedTokenResponseError("expires_in is not a number") from None
        if not math.isfinite(expires_in) or expires_in < 0:
            raise MalformedTokenResponseError("expires_in is not a finite, non-negative number")

        token_type = data.get("token_type", "bearer")
        scope = data.get("scope", "")
        if not isinstance(token_type, str) or not isinstance(scope, str):
            raise MalformedTokenResponseError("token_type and scope must be strings")

        return cls(
            token_type=token_type,
            scope=scope,
            expires_in=expires_in,
            access_token=access_token,
            created_at=time.time() if now is None else now,
        )


def is_token_valid(token: AccessToken | None, now: float | None = None) -> bool:
    """True if *token* exists and has not expired yet.

    No clock-skew margin: at exactly ``created_at + expires_in`` the token
    is already invalid.
    """
    if token is None:
        return False
    if now is None:
        now = time.time()
    return now < token.created_at + token.expires_in
