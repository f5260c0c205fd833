# domain/response.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

REDIRECT_CODES = frozenset({301, 302, 303, 307, 308})
PERMANENT_REDIRECT_CODES = frozenset({301, 308})

# 307/308 must be re-sent with the same method and body
METHOD_PRESERVING_REDIRECT_CODES = frozenset({307, 308})


@dataclass(frozen=True)
class Response:
    """
    Final or intermediate answer to a single request attempt.

    `header` maps canonical header names to every value received for that
    name, in arrival order. Lookups are case-sensitive.
    """

    code: int
    header: Dict[str, List[str]] = field(default_factory=dict)
    url: str = ""
    body: bytes = b""

    @property
    def is_redirect(self) -> bool:
        return self.code in REDIRECT_CODES

    @property
    def is_permanent_redirect(self) -> bool:
        return self.code in PERMANENT_REDIRECT_CODES

    @property
    def location(self) -> Optional[str]:
        values = self.header.get("Location") or []
        return values[0] if values else None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
