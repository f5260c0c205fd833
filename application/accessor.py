# application/accessor.py
from __future__ import annotations

from typing import Dict, Optional, Protocol

from application.ports.http_client import Body, HttpClientPort
from application.ports.logger import LoggerPort, NullLogger
from application.ports.requests_client import RequestsSessionHttpClient
from application.resource import Resource
from application.services.accessor_settings import AccessorSettings
from domain.response import Response


class UrlResolverPort(Protocol):
    def resolve_url(self, url: str) -> str:
        ...


class HttpAccessor:
    """
    Shared transport context for resources.

    Resources created from one accessor (including the delegates spawned for
    temporary redirects) share its HTTP client, settings and logger. The
    accessor keeps no per-resource state.
    """

    def __init__(
        self,
        http_client: Optional[HttpClientPort] = None,
        settings: Optional[AccessorSettings] = None,
        logger: Optional[LoggerPort] = None,
        url_resolver: Optional[UrlResolverPort] = None,
    ):
        self._settings = settings or AccessorSettings()
        self._http = http_client or RequestsSessionHttpClient(timeout_sec=self._settings.timeout_sec)
        self._logger = logger or NullLogger()
        self._url_resolver = url_resolver

    @property
    def settings(self) -> AccessorSettings:
        return self._settings

    @property
    def logger(self) -> LoggerPort:
        return self._logger

    @property
    def follow_unsafe_redirects(self) -> bool:
        return self._settings.follow_unsafe_redirects

    def resource(self, uri: str) -> Resource:
        if self._url_resolver is not None:
            uri = self._url_resolver.resolve_url(uri)
        return Resource(self, uri, max_redirects=self._settings.max_redirects, logger=self._logger)

    __getitem__ = resource

    def perform(self, method: str, uri: str, body: Body = None) -> Response:
        headers: Dict[str, str] = {"User-Agent": self._settings.user_agent}

        self._logger.debug("http.request", method=method.upper(), url=uri, has_body=body is not None)
        response = self._http.request(method=method, url=uri, headers=headers, body=body)
        log = self._logger.warning if response.code >= 400 else self._logger.info
        log(
            "http.response",
            method=method.upper(),
            url=uri,
            status=response.code,
            location=response.location if response.is_redirect else None,
        )
        return response

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "HttpAccessor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
