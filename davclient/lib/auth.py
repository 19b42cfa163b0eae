"""
Authentication helpers.

The client does not implement any authentication scheme itself, it only
picks one of the auth objects offered by niquests from the configured
credentials.
"""

from __future__ import annotations

from typing import Optional

from niquests.auth import AsyncHTTPDigestAuth, AuthBase, HTTPBasicAuth

from davclient.lib import error

AUTH_TYPES = ("basic", "digest", "bearer")


class BearerTokenAuth(AuthBase):
    """Sends the token in an ``Authorization: Bearer`` header."""

    def __init__(self, token: str) -> None:
        self.token = token

    def __eq__(self, other: object) -> bool:
        return isinstance(other, BearerTokenAuth) and self.token == other.token

    def __hash__(self) -> int:
        return hash(self.token)

    def __repr__(self) -> str:
        return "BearerTokenAuth(<hidden>)"

    def __call__(self, r):
        r.headers["Authorization"] = f"Bearer {self.token}"
        return r


def extract_auth_types(header: str) -> set[str]:
    """
    Extract authentication types from WWW-Authenticate header.

    Example:
        >>> sorted(extract_auth_types('Basic realm="test", Digest realm="test"'))
        ['basic', 'digest']

    Reference:
        https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/WWW-Authenticate#syntax
    """
    return {h.split()[0] for h in header.lower().split(",") if h.strip()}


def build_auth_object(
    auth_type: Optional[str],
    username: Optional[str],
    password: Optional[str],
) -> AuthBase:
    """
    Build a niquests auth object from plain credentials.

    Basic auth is used unless another auth_type is given.  For bearer
    auth the password is the token.
    """
    auth_type = (auth_type or "basic").lower()
    if auth_type == "bearer":
        return BearerTokenAuth(password or "")
    if auth_type == "digest":
        return AsyncHTTPDigestAuth(username or "", password or "")
    if auth_type == "basic":
        return HTTPBasicAuth(username or "", password or "")
    raise error.InvalidArgumentError(
        reason=f"Unsupported auth type: {auth_type}, expected one of {', '.join(AUTH_TYPES)}"
    )
