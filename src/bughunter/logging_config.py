"""Process-wide logging setup, run once by each entry point.

setup_logging() must run before litellm is imported: litellm reads
LITELLM_LOG at import time. cleanup_third_party_handlers() runs after
imports and drops the StreamHandler litellm attaches to its logger,
so its records reach the root handler once.

Level comes from Settings (LOG_LEVEL); DEBUG_MODE forces DEBUG for
bughunter and the HTTP/LLM libraries alike.
"""

import logging
import os

from bughunter.config import Settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# INFO-per-request libraries, kept at WARNING unless debugging
_NOISY_LOGGERS = ("LiteLLM", "httpx", "httpcore")

_phase1_done = False
_phase2_done = False


def setup_logging(settings: Settings | None = None) -> None:
    """Configure the root logger from ``settings``. Idempotent."""
    global _phase1_done  # noqa: PLW0603
    if _phase1_done:
        return
    _phase1_done = True

    if settings is None:
        settings = Settings()

    if settings.debug_mode:
        level = logging.DEBUG
        os.environ.setdefault("LITELLM_LOG", "DEBUG")
    else:
        level = getattr(logging, settings.log_level.upper(), logging.INFO)
        os.environ.setdefault("LITELLM_LOG", "WARNING")

    logging.basicConfig(level=level, format=_FORMAT, datefmt=_DATEFMT)

    noisy_level = logging.DEBUG if settings.debug_mode else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)


def cleanup_third_party_handlers() -> None:
    """Let litellm records propagate to root only. Idempotent."""
    global _phase2_done  # noqa: PLW0603
    if _phase2_done:
        return
    _phase2_done = True

    lg = logging.getLogger("LiteLLM")
    lg.handlers.clear()
    lg.propagate = True
