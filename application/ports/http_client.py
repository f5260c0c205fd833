# application/ports/http_client.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional, Union

from domain.response import Response

Body = Union[str, bytes, None]


class HttpClientPort(ABC):
    @abstractmethod
    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Body = None,
    ) -> Response:
        """
        Send exactly one request. Implementations must not follow redirects;
        3xx responses are returned as-is.
        """
        ...

    def close(self) -> None:
        """Release pooled connections. Clients without resources keep this no-op."""
        return None
