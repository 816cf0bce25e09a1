"""Structured logging setup for framebatch."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure structured logging with consistent format."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    # urllib3 logs every request at DEBUG during uploads
    logging.getLogger("urllib3").setLevel(max(logging.WARNING, logging.getLogger().level))
