"""Logging setup for hosts that embed the pipeline without their own config."""

import logging
from typing import Optional

from seo_intel.config import get_settings


def setup_logging(log_level: Optional[str] = None) -> None:
    """Configure the root logger with the project's standard line format.

    Defaults to ``Settings.log_level``.
    """
    level_name = (log_level or get_settings().log_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
