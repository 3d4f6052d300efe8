from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .lib.paths import PATHS, expand

DEFAULT_LOG_PATH = PATHS.log_default


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    console_level: Optional[int] = logging.WARNING,
) -> str:
    """Configure logging.

    Every command and decision goes to the log file; the console only gets
    warnings unless console_level says otherwise (None disables it).

    If the requested directory is not writable we fall back to a file in
    the current working directory.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(min(level, console_level or level))

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_headless_setup_configured", False):
        return getattr(logger, "_headless_setup_log_path", log_path)

    requested = expand(log_path)
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    try:
        requested.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(requested, encoding="utf-8")
        chosen_path = str(requested)
    except OSError:
        fallback = Path.cwd() / "headless-setup.log"
        file_handler = logging.FileHandler(fallback, encoding="utf-8")
        chosen_path = str(fallback)
    file_handler.setFormatter(fmt)
    file_handler.setLevel(level)
    handlers.append(file_handler)

    if console_level is not None:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        console.setLevel(console_level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_headless_setup_configured", True)
    setattr(logger, "_headless_setup_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
