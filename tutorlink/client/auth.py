# tutorlink/client/auth.py
# Bearer token sources for the API client
#
# Services never read a token from global state: they are handed a
# TokenProvider and ask it right before each request.

import os
from typing import Callable, Optional, Protocol


class TokenProvider(Protocol):
    def get_token(self) -> Optional[str]:
        ...


class StaticTokenProvider:
    """Holds one token in memory. set_token(None) logs the client out."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token or None

    def set_token(self, token: Optional[str]) -> None:
        self._token = token


class CallableTokenProvider:
    """Asks a callable every time, e.g. a session store lookup."""

    def __init__(self, fn: Callable[[], Optional[str]]):
        self._fn = fn

    def get_token(self) -> Optional[str]:
        return self._fn() or None


class EnvTokenProvider:
    """Reads the token from an environment variable (CLI / scripts)."""

    def __init__(self, variable: str = "TUTORLINK_TOKEN"):
        self.variable = variable

    def get_token(self) -> Optional[str]:
        return os.getenv(self.variable) or None
