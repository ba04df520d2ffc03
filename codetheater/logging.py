"""
codetheater.logging - Logging setup for the CLI.

Diagnostics go to the ``codetheater`` logger; the screenplay itself goes
through the rich console. litellm and its HTTP client stay quiet unless
--verbose is given.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("codetheater")

NOISY_LOGGERS = ("LiteLLM", "litellm", "httpx")


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logger.setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if verbose else logging.WARNING)
