"""Logging setup for wxdash.

Standard Logger Initialization Pattern
--------------------------------------
Modules use the standard Python pattern:

    import logging
    logger = logging.getLogger(__name__)

Handlers are attached once, by the entry point: ``setup_cli_logging`` for
commands (stderr) and ``setup_tui_logging`` for the dashboard (a rotating
file, since the terminal belongs to Textual).
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from wxdash.config.constants import WXDASH_CONFIG_DIR

# Max log file size: 5MB, keep 2 backups
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 2

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _file_handler(log_file: Path) -> RotatingFileHandler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=_MAX_LOG_BYTES, backupCount=_BACKUP_COUNT)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_tui_logging(module_name: str, log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Set up logging for the Textual dashboard.

    The root logger goes to ``tui_debug.log`` at WARNING to keep third-party
    noise down; wxdash's own loggers are let through at INFO.
    """
    try:
        root = logging.getLogger()
        if not root.handlers:
            root.addHandler(_file_handler((log_dir or WXDASH_CONFIG_DIR) / "tui_debug.log"))
            root.setLevel(logging.WARNING)

        logging.getLogger("wxdash").setLevel(logging.INFO)
        return logging.getLogger(module_name)

    except OSError as e:
        # Logging is what failed, so report it on stderr
        print(f"Warning: TUI logging setup failed: {e}", file=sys.stderr)
        return logging.getLogger(module_name)


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to the current sys.stderr rather than the one at setup."""

    @property  # type: ignore[override]
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def setup_cli_logging(verbose: bool = False, quiet: bool = False, level: Optional[str] = None) -> None:
    """Route wxdash logs to stderr for CLI commands.

    ``--verbose`` and ``--quiet`` win over ``level`` (from WXDASH_LOG_LEVEL);
    the default is WARNING.
    """
    if verbose:
        resolved = logging.DEBUG
    elif quiet:
        resolved = logging.ERROR
    elif level:
        resolved = logging.getLevelName(level.upper())
    else:
        resolved = logging.WARNING

    logger = logging.getLogger("wxdash")
    if not any(isinstance(h, _StderrHandler) for h in logger.handlers):
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(resolved)
