from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name} | {message}"


def configure_logging(debug: bool = False, log_dir: Optional[Path] = None) -> None:
    """
    Replace loguru's default sink: stderr at INFO (DEBUG with --debug),
    plus a rotating file under log_dir when given.
    """
    level = "DEBUG" if debug else "INFO"
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, backtrace=debug, diagnose=False)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "alexa_prune.log",
            level=level,
            format=LOG_FORMAT,
            rotation="5 MB",
            retention=5,
            encoding="utf-8",
        )
