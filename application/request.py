# application/request.py
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from application.ports.http_client import Body
from domain.response import METHOD_PRESERVING_REDIRECT_CODES, Response

if TYPE_CHECKING:
    from application.resource import Resource

SAFE_METHODS = frozenset({"get", "head"})


class Request:
    """
    A single attempt against a resource.

    The target URI is captured when the request is built, so a request made
    after a permanent redirect goes to the resource's new identity.
    """

    def __init__(self, method: str, resource: "Resource", body: Body = None):
        self.method = str(method).lower()
        self.resource = resource
        self.uri = resource.effective_uri
        self.body = body
        self._response: Optional[Response] = None

    @property
    def response(self) -> Response:
        if self._response is None:
            self._response = self.resource.accessor.perform(self.method, self.uri, self.body)
        return self._response

    def should_be_redirected(self) -> bool:
        if self.method in SAFE_METHODS:
            return True
        if self.response.code in METHOD_PRESERVING_REDIRECT_CODES:
            return True
        return bool(getattr(self.resource.accessor, "follow_unsafe_redirects", False))

    def __repr__(self) -> str:
        return f"<Request {self.method.upper()} {self.uri}>"
