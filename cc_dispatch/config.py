"""Runtime settings read from the environment."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Mapping

from cc_dispatch.exceptions import ConfigError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
_LOG_FORMATS = ("console", "json")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(name, value, "one of 1/0, true/false, yes/no, on/off")


@dataclass(frozen=True)
class Settings:
    """cc-dispatch settings.

    Environment variables:
        CC_DISPATCH_REMOTE_CPP         — preprocessing runs on the worker (default: false)
        CC_DISPATCH_COLOR_DIAGNOSTICS  — force (1) or forbid (0) colored diagnostics;
                                         unset means auto-detect from the terminal
        CC_DISPATCH_LOG_LEVEL          — DEBUG | INFO | WARNING | ERROR | CRITICAL (default: WARNING)
        CC_DISPATCH_LOG_FORMAT         — console | json (default: console)
    """

    remote_cpp: bool = False
    color_diagnostics: bool | None = None
    log_level: str = "WARNING"
    log_format: str = "console"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        remote_cpp = parse_bool("CC_DISPATCH_REMOTE_CPP", env.get("CC_DISPATCH_REMOTE_CPP", "0"))

        color_raw = env.get("CC_DISPATCH_COLOR_DIAGNOSTICS")
        color = None if color_raw is None else parse_bool("CC_DISPATCH_COLOR_DIAGNOSTICS", color_raw)

        log_level = env.get("CC_DISPATCH_LOG_LEVEL", "WARNING").upper()
        if log_level not in _LOG_LEVELS:
            raise ConfigError("CC_DISPATCH_LOG_LEVEL", log_level, " | ".join(_LOG_LEVELS))
        log_format = env.get("CC_DISPATCH_LOG_FORMAT", "console").lower()
        if log_format not in _LOG_FORMATS:
            raise ConfigError("CC_DISPATCH_LOG_FORMAT", log_format, " | ".join(_LOG_FORMATS))

        return cls(
            remote_cpp=remote_cpp,
            color_diagnostics=color,
            log_level=log_level,
            log_format=log_format,
        )

    def color_wanted(self, environ: Mapping[str, str] | None = None) -> bool:
        """Explicit setting, else: a real terminal on stderr."""
        if self.color_diagnostics is not None:
            return self.color_diagnostics
        env = os.environ if environ is None else environ
        if env.get("TERM", "dumb") == "dumb":
            return False
        return sys.stderr.isatty()
