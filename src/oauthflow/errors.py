# OAuth2 flow errors.
# Created: 2026-10-18

from __future__ import annotations


class OAuth2Error(Exception):
    """Base class for all oauthflow errors."""


class ConfigurationError(OAuth2Error):
    """Profile or provider configuration is invalid."""


class AuthenticationError(OAuth2Error):
    """The authorization callback could not be turned into a stored token."""


class StateMismatchError(AuthenticationError):
    """The callback ``state`` is missing or was not issued for this session."""

    def __init__(self, profile: str):
        self.profile = profile
        super().__init__(f"State mismatch for profile '{profile}'")


class AuthorizationDeniedError(AuthenticationError):
    """The provider redirected back with an error instead of a code."""

    def __init__(self, profile: str, error: str, description: str | None = None):
        self.profile = profile
        self.error = error
        self.description = description
        message = f"Authorization for profile '{profile}' failed: {error}"
        if description:
            message += f" ({description})"
        super().__init__(message)


class TokenExchangeError(AuthenticationError):
    """The token endpoint answered with a non-success status or non-JSON body.

    The message follows ``{status}: {reason}: {body}`` so the provider's own
    diagnostics reach the caller unchanged.
    """

    def __init__(self, status_code: int, reason: str, body: str):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"{status_code}: {reason}: {body}")


class MalformedTokenResponseError(TokenExchangeError):
    """The token endpoint returned JSON that is not a usable token."""

    def __init__(self, detail: str, status_code: int = 200, reason: str = "OK"):
        self.detail = detail
        # The raw body is not echoed: it may hold a live access token
        super().__init__(status_code, reason, f"malformed token response: {detail}")
