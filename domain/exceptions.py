# domain/exceptions.py
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from domain.response import Response


class ResourcefulError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(ResourcefulError):
    pass


class RedirectError(ResourcefulError):
    def __init__(self, message: str, response: Optional["Response"] = None):
        super().__init__(message)
        self.response = response


class MissingLocationError(RedirectError):
    def __init__(self, response: "Response"):
        super().__init__(
            f"Redirect response {response.code} has no Location header",
            response=response,
        )


class TooManyRedirectsError(RedirectError):
    def __init__(self, max_redirects: int, response: "Response"):
        super().__init__(
            f"Exceeded {max_redirects} redirects (last status {response.code})",
            response=response,
        )
        self.max_redirects = max_redirects
