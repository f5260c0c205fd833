# infrastructure/config/env_settings.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, TypeVar

from dotenv import dotenv_values

from application.services.accessor_settings import AccessorSettings
from domain.exceptions import ConfigurationError

T = TypeVar("T")

ENV_PREFIX = "RESOURCEFUL_"
DEFAULT_ENV_PATH = Path(__file__).parent.parent.parent / ".env"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


class EnvSettingsLoader:
    """
    Builds AccessorSettings from RESOURCEFUL_* variables.

    Values in the .env file win over the process environment, matching how
    scenario secrets are resolved elsewhere in the toolchain.
    """

    def __init__(self, env_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        path = env_path or DEFAULT_ENV_PATH
        self._values: Dict[str, str] = {}
        if path.exists():
            self._values.update({k: v for k, v in dotenv_values(path).items() if v is not None})
        for key, value in (os.environ if environ is None else environ).items():
            self._values.setdefault(key, value)

    def load(self) -> AccessorSettings:
        defaults = AccessorSettings()
        return AccessorSettings(
            timeout_sec=self._read("TIMEOUT_SEC", float, defaults.timeout_sec),
            max_redirects=self._read("MAX_REDIRECTS", int, defaults.max_redirects),
            user_agent=self._read("USER_AGENT", str, defaults.user_agent),
            follow_unsafe_redirects=self._read(
                "FOLLOW_UNSAFE_REDIRECTS", _parse_bool, defaults.follow_unsafe_redirects
            ),
            log_level=self._read("LOG_LEVEL", str, defaults.log_level).upper(),
        )

    def _read(self, name: str, convert: Callable[[str], T], default: T) -> T:
        key = ENV_PREFIX + name
        raw = self._values.get(key)
        if raw is None:
            return default
        try:
            return convert(raw)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid value for {key}: {raw!r}") from exc
