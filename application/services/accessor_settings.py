# application/services/accessor_settings.py
from __future__ import annotations

from dataclasses import dataclass, replace

from domain.exceptions import ConfigurationError

VERSION = "0.1.0"
DEFAULT_USER_AGENT = f"resourceful/{VERSION}"
DEFAULT_MAX_REDIRECTS = 10
DEFAULT_TIMEOUT_SEC = 20.0


@dataclass(frozen=True)
class AccessorSettings:
    timeout_sec: float = DEFAULT_TIMEOUT_SEC
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    user_agent: str = DEFAULT_USER_AGENT
    follow_unsafe_redirects: bool = False
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.max_redirects < 0:
            raise ConfigurationError("max_redirects must not be negative")
        if self.timeout_sec <= 0:
            raise ConfigurationError("timeout_sec must be positive")

    def with_overrides(self, **changes) -> "AccessorSettings":
        """Copy with the given fields replaced; `None` values are ignored."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
