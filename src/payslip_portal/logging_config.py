"""Process-wide logging setup shared by the API and CLI."""

from __future__ import annotations

import logging


def setup_logging(*, level: str = "INFO") -> None:
    """Configure a single plain-text stream handler on the root logger."""

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d  %(message)s",
        datefmt="%H:%M:%S",
    ))
    root.addHandler(handler)
