"""
Logging setup for the payment links service.
"""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once: stdout handler, one line per record.

    Third-party loggers that are noisy at INFO (httpx logs every request) are
    raised to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
