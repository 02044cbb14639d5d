"""
Runtime settings for the cheat sheet generator, read from the environment.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_MODEL = "claude-sonnet-4-20250514"
PAGE_SIZES = ("A4", "letter")


@dataclass(frozen=True)
class Settings:
    port: int = 5000
    debug: bool = False
    log_level: str = "INFO"
    anthropic_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    page_size: str = "A4"
    footer: str = ""


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    page_size = env.get("CHEATSHEET_PAGE_SIZE", "A4")
    if page_size not in PAGE_SIZES:
        raise ValueError(f"CHEATSHEET_PAGE_SIZE must be one of {PAGE_SIZES}, got {page_size!r}")

    return Settings(
        port=int(env.get("PORT", 5000)),
        debug=_env_bool(env.get("FLASK_DEBUG"), False),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        anthropic_api_key=env.get("ANTHROPIC_API_KEY") or None,
        model=env.get("CHEATSHEET_MODEL", DEFAULT_MODEL),
        page_size=page_size,
        footer=env.get("CHEATSHEET_FOOTER", ""),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
