"""Logging setup shared by the server entry points."""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _file_handler(log_file: Union[str, Path]) -> Tuple[Optional[logging.Handler], Optional[str]]:
    log_path = Path(log_file)
    if not log_path.is_absolute():
        log_path = Path.cwd() / log_path

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path, encoding="utf-8"), None
    except OSError as exc:
        fallback_path = Path.cwd() / log_path.name
        try:
            handler = logging.FileHandler(fallback_path, encoding="utf-8")
        except OSError as fallback_exc:
            return None, f"Failed to open log file at '{log_path}' or '{fallback_path}': {fallback_exc}"
        return handler, f"Failed to open log file at '{log_path}', using '{fallback_path}': {exc}"


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Union[str, Path, None] = None,
    include_stream: bool = True,
) -> logging.Logger:
    """Configure the root logger and return the ``stripbooth`` logger.

    ``log_file`` of ``None`` disables file logging. A log file that cannot be
    opened falls back to the working directory and the problem is reported as
    a warning once logging is up.
    """
    formatter = logging.Formatter(FORMAT)
    handlers = []
    warning = None

    if log_file:
        handler, warning = _file_handler(log_file)
        if handler:
            handlers.append(handler)

    if include_stream:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    logger = logging.getLogger("stripbooth")
    logger.setLevel(level)
    if warning:
        logger.warning(warning)
    return logger
