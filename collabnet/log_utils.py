from __future__ import annotations

import logging
import os
import sys
from typing import Optional


# Define custom log levels for crawl progress
STEP_LEVEL = 25  # Between INFO (20) and WARNING (30)
SUCCESS_LEVEL = 22  # Between INFO (20) and STEP (25)

# Register custom levels with the logging module
logging.addLevelName(STEP_LEVEL, "STEP")
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")


class LogSource:
    """
    Constants for log sources to ensure consistent naming and coloring.
    """
    DBLP = "DBLP"
    ENGINE = "Engine"
    SYSTEM = "System"


class LogCategory:
    """
    Constants for log categories used as semantic tags on each line.
    """
    VISIT = "VISIT"
    SCRAPE = "SCRAPE"
    SKIP = "SKIP"
    SAVE = "SAVE"
    ERROR = "ERROR"
    DEBUG = "DEBUG"
    PLAN = "PLAN"


class ColoredFormatter(logging.Formatter):
    """
    Formatter that adds ANSI color codes to log levels, sources, and categories
    for terminal output.
    """

    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD_CYAN = "\033[1;36m"
    BOLD_GREEN = "\033[1;32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    BOLD_RED = "\033[1;31m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    GREEN = "\033[32m"
    DARK_GRAY = "\033[90m"
    RESET = "\033[0m"

    LEVEL_COLORS = {
        "DEBUG": CYAN,
        "INFO": WHITE,
        "STEP": BOLD_CYAN,
        "SUCCESS": BOLD_GREEN,
        "WARNING": YELLOW,
        "ERROR": RED,
        "CRITICAL": BOLD_RED,
    }

    SOURCE_COLORS = {
        LogSource.DBLP: CYAN,
        LogSource.ENGINE: BLUE,
        LogSource.SYSTEM: WHITE,
    }

    CATEGORY_COLORS = {
        LogCategory.VISIT: CYAN,
        LogCategory.SCRAPE: BOLD_GREEN,
        LogCategory.SKIP: DARK_GRAY,
        LogCategory.SAVE: GREEN,
        LogCategory.ERROR: RED,
        LogCategory.DEBUG: DARK_GRAY,
        LogCategory.PLAN: MAGENTA,
    }

    def __init__(self, fmt: str, use_color: bool = True):
        super().__init__(fmt)
        self.use_color = use_color

    def _tag(self, value: Optional[str], palette: dict) -> Optional[str]:
        if not value:
            return None
        if self.use_color and value in palette:
            return f"{palette[value]}[{value}]{self.RESET}"
        return f"[{value}]"

    def format(self, record: logging.LogRecord) -> str:
        """
        Prefix the message with its source and category tags, coloring the
        level name when the terminal supports it. The record is restored
        afterwards so other handlers see it unchanged.
        """
        original_msg = record.msg
        original_level = record.levelname

        parts = [
            tag for tag in (
                self._tag(getattr(record, "source", None), self.SOURCE_COLORS),
                self._tag(getattr(record, "category", None), self.CATEGORY_COLORS),
            ) if tag
        ]
        if parts:
            record.msg = f"{' '.join(parts)} {record.msg}"
        if self.use_color and record.levelname in self.LEVEL_COLORS:
            record.levelname = f"{self.LEVEL_COLORS[record.levelname]}{record.levelname}{self.RESET}"

        try:
            return super().format(record)
        finally:
            record.msg = original_msg
            record.levelname = original_level


class CategoryAdapter(logging.LoggerAdapter):
    """
    Adapter that moves source and category keyword arguments into the
    record's extra dict.
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get("extra", {})

        source = kwargs.pop("source", None)
        if source:
            extra["source"] = source

        category = kwargs.pop("category", None)
        if category:
            extra["category"] = category

        kwargs["extra"] = extra
        return msg, kwargs


class Logger:
    """
    Process-wide logger built on the standard logging module with colors,
    custom levels (STEP, SUCCESS), source/category tags and an optional run
    log file. Fetch workers log through the same handlers as the main thread.
    """

    LOG_FORMAT = "%(asctime)s [%(levelname)-8s] (%(threadName)s) %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(self, name: str = "collabnet"):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

        self._logger.handlers.clear()

        self._console_handler = logging.StreamHandler(sys.stdout)
        self._console_handler.setLevel(logging.INFO)
        console_formatter = ColoredFormatter(self.LOG_FORMAT, use_color=sys.stdout.isatty())
        console_formatter.datefmt = self.DATE_FORMAT
        self._console_handler.setFormatter(console_formatter)
        self._logger.addHandler(self._console_handler)

        self._file_handler: Optional[logging.FileHandler] = None
        self._log_file_path: Optional[str] = None

        self._adapter = CategoryAdapter(self._logger, {})

    def set_log_file(self, path: str):
        """
        Start mirroring all log messages, including debug ones, to the given file.
        """
        parent_dir = os.path.dirname(path)
        if parent_dir:
            try:
                os.makedirs(parent_dir, exist_ok=True)
            except OSError:
                pass

        self.close()
        try:
            handler = logging.FileHandler(path, mode="w", encoding="utf-8")
        except OSError as e:
            self._logger.error(f"Failed to open log file {path}: {e}")
            return

        handler.setLevel(logging.DEBUG)
        handler.setFormatter(ColoredFormatter(self.LOG_FORMAT, use_color=False))
        handler.formatter.datefmt = self.DATE_FORMAT
        self._logger.addHandler(handler)
        self._file_handler = handler
        self._log_file_path = path

    def close(self):
        """
        Stop logging to file.
        """
        if self._file_handler is not None:
            self._logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None
            self._log_file_path = None

    def step(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None):
        """
        Log a top-level workflow step.
        """
        self._adapter.log(STEP_LEVEL, msg, source=source, category=category)

    def debug(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None):
        self._adapter.debug(msg, source=source, category=category)

    def info(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None):
        self._adapter.info(msg, source=source, category=category)

    def warn(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None):
        self._adapter.warning(msg, source=source, category=category)

    def error(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None,
              exc_info: bool = False):
        self._adapter.error(msg, source=source, category=category, exc_info=exc_info)

    def success(self, msg: str, *, source: Optional[str] = None, category: Optional[str] = None):
        """
        Log successful operations.
        """
        self._adapter.log(SUCCESS_LEVEL, msg, source=source, category=category)

    @property
    def log_file_path(self) -> Optional[str]:
        return self._log_file_path


# Global logger instance
logger = Logger()
