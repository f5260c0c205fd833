# application/ports/requests_client.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

import requests

from application.ports.http_client import Body, HttpClientPort
from domain.response import Response


def canonical_header_name(name: str) -> str:
    return "-".join(part.capitalize() for part in name.split("-"))


def _header_pairs(resp: requests.Response) -> Iterable[Tuple[str, str]]:
    # urllib3's HTTPHeaderDict yields repeated headers as separate pairs;
    # requests' merged CaseInsensitiveDict is the fallback
    raw_headers = getattr(resp.raw, "headers", None)
    if hasattr(raw_headers, "iteritems"):
        return list(raw_headers.iteritems())
    if raw_headers is not None and hasattr(raw_headers, "items"):
        return list(raw_headers.items())
    return list(resp.headers.items())


def collect_headers(pairs: Iterable[Tuple[str, str]]) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {}
    for name, value in pairs:
        out.setdefault(canonical_header_name(name), []).append(value)
    return out


class RequestsSessionHttpClient(HttpClientPort):
    def __init__(
        self,
        base_headers: Optional[Dict[str, str]] = None,
        timeout_sec: float = 20,
        session: Optional[requests.Session] = None,
    ):
        self._session = session or requests.Session()
        self._base_headers = base_headers or {}
        self._timeout = timeout_sec

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Body = None,
    ) -> Response:
        merged = dict(self._base_headers)
        if headers:
            merged.update(headers)

        resp = self._session.request(
            method=method.upper(),
            url=url,
            headers=merged,
            data=body,
            timeout=self._timeout,
            allow_redirects=False,
        )

        return Response(
            code=resp.status_code,
            header=collect_headers(_header_pairs(resp)),
            url=str(resp.url),
            body=resp.content or b"",
        )

    def close(self) -> None:
        self._session.close()
