"""Logging utilities for svgsolid."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import structlog

# Marks handlers installed here so reconfiguring replaces them
_HANDLER_MARK = "_svgsolid_handler"


@dataclass
class ConversionStats:
    """Statistics from a conversion run."""

    processed_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    triangle_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    durations_ms: dict[str, float] = field(default_factory=dict)
    was_cancelled: bool = False
    cancelled_count: int = 0
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (auto-generated if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    if log_file is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(f"svgsolid_{timestamp}.log")

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root_logger.removeHandler(handler)
            handler.close()

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(getattr(logging, file_level.upper()))
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
    )
    setattr(file_handler, _HANDLER_MARK, True)

    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    setattr(console_handler, _HANDLER_MARK, True)
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("svgsolid")
    logger.info("Logging initialized", log_file=str(log_file), level=file_level)

    return logger


class ConversionLogger:
    """Logger for tracking conversion progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = ConversionStats()

    def log_file_start(self, file_name: str) -> None:
        """Log start of a file conversion."""
        self._logger.debug("Converting file", file=file_name)

    def log_file_complete(
        self,
        file_name: str,
        triangles: int,
        duration_ms: float,
    ) -> None:
        """Log successful file conversion."""
        self._logger.info(
            "File converted",
            file=file_name,
            triangles=triangles,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.processed_count += 1
        self._stats.triangle_count += triangles
        self._stats.durations_ms[file_name] = duration_ms

    def log_file_skipped(self, file_name: str, reason: str) -> None:
        """Log skipped file."""
        self._logger.info("File skipped", file=file_name, reason=reason)
        self._stats.skipped_count += 1

    def log_file_error(
        self,
        file_name: str,
        error: Exception | str,
        traceback: str | None = None,
    ) -> None:
        """Log file conversion error."""
        self._logger.error(
            "File conversion failed",
            file=file_name,
            error=str(error),
            error_type=type(error).__name__ if isinstance(error, Exception) else None,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((file_name, str(error)))

    def log_preflight(self, file_name: str, passed: bool, errors: int, warnings: int) -> None:
        """Log preflight outcome."""
        self._logger.debug(
            "Preflight",
            file=file_name,
            passed=passed,
            errors=errors,
            warnings=warnings,
        )

    @property
    def stats(self) -> ConversionStats:
        """Get current conversion statistics."""
        return self._stats
