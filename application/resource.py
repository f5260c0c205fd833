# application/resource.py
from __future__ import annotations

from typing import Any, Callable, Optional
from urllib.parse import urljoin

from application.ports.http_client import Body
from application.ports.logger import LoggerPort, NullLogger
from application.request import Request
from application.services.accessor_settings import DEFAULT_MAX_REDIRECTS
from domain.exceptions import MissingLocationError, TooManyRedirectsError
from domain.response import Response

RedirectCallback = Callable[[Request, Response], Any]


class Resource:
    """
    A remote resource addressed by URI.

    Permanent redirects (301, 308) rewrite `effective_uri` and the request is
    re-issued from this resource. Temporary redirects leave this resource
    untouched; the request is re-issued from a new resource at the target URI
    sharing the same accessor.
    """

    def __init__(
        self,
        accessor: Any,
        uri: str,
        *,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        logger: Optional[LoggerPort] = None,
    ):
        self._accessor = accessor
        self._effective_uri = uri
        self._max_redirects = max_redirects
        self._logger = logger or NullLogger()
        self._on_redirect: Optional[RedirectCallback] = None

    @property
    def accessor(self) -> Any:
        return self._accessor

    @property
    def effective_uri(self) -> str:
        return self._effective_uri

    uri = effective_uri

    @property
    def max_redirects(self) -> int:
        return self._max_redirects

    def on_redirect(self, callback: Optional[RedirectCallback] = None) -> Optional[RedirectCallback]:
        """
        Register `callback(request, response)` to run before each redirect is
        followed, replacing any previous one, and return it. Called without
        an argument, return the registered callback (or None).

        Works as a decorator too::

            @resource.on_redirect
            def seen(request, response): ...
        """
        if callback is not None:
            self._on_redirect = callback
        return self._on_redirect

    def get(self) -> Response:
        return self.do_read_request("get")

    def head(self) -> Response:
        return self.do_read_request("head")

    def delete(self) -> Response:
        return self.do_read_request("delete")

    def post(self, data: Body = None) -> Response:
        return self.do_write_request("post", data)

    def put(self, data: Body = None) -> Response:
        return self.do_write_request("put", data)

    def do_read_request(self, method: str, *, redirect_count: int = 0) -> Response:
        return self._resolve(
            lambda: Request(method, self),
            lambda target: target.do_read_request(method, redirect_count=redirect_count + 1),
            redirect_count,
        )

    def do_write_request(self, method: str, data: Body, *, redirect_count: int = 0) -> Response:
        return self._resolve(
            lambda: Request(method, self, data),
            lambda target: target.do_write_request(method, data, redirect_count=redirect_count + 1),
            redirect_count,
        )

    def _resolve(
        self,
        build_request: Callable[[], Request],
        reissue: Callable[["Resource"], Response],
        redirect_count: int,
    ) -> Response:
        request = build_request()
        response = request.response

        if not response.is_redirect:
            return response

        if not request.should_be_redirected():
            self._logger.info(
                "resource.redirect_not_followed",
                uri=self._effective_uri,
                method=request.method,
                code=response.code,
            )
            return response

        if redirect_count >= self._max_redirects:
            raise TooManyRedirectsError(self._max_redirects, response)

        new_uri = self._redirect_target(response)

        if self._on_redirect is not None:
            self._on_redirect(request, response)

        permanent = response.is_permanent_redirect
        self._logger.info(
            "resource.redirect",
            code=response.code,
            permanent=permanent,
            from_uri=self._effective_uri,
            to_uri=new_uri,
            hop=redirect_count + 1,
        )

        if permanent:
            self._effective_uri = new_uri
            return reissue(self)

        return reissue(self._spawn(new_uri))

    def _redirect_target(self, response: Response) -> str:
        # reads `header` directly: only code, header and the redirect flags are
        # required of a response, `location` is a convenience of domain.Response
        values = response.header.get("Location") or []
        location = values[0] if values else None
        if not location:
            raise MissingLocationError(response)
        return urljoin(self._effective_uri, location)

    def _spawn(self, uri: str) -> "Resource":
        delegate = type(self)(self._accessor, uri, max_redirects=self._max_redirects, logger=self._logger)
        if self._on_redirect is not None:
            delegate.on_redirect(self._on_redirect)
        return delegate

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._effective_uri}>"
