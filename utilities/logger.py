"""
Structured logging setup using structlog.
Provides structured logging with different output formats and levels.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import structlog
from structlog.stdlib import LoggerFactory


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[Union[str, Path]] = None,
    debug: bool = False
) -> None:
    """
    Set up structured logging with configurable output formats.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format (json or console)
        log_file: Optional log file path
        debug: Add call site information to every event
    """

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    # Configure structlog processors
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors.append(structlog.processors.CallsiteParameterAdder())

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    # Set up file logging if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(getattr(logging, log_level.upper()))
        file_handler.setFormatter(logging.Formatter('%(message)s'))
        logging.getLogger().addHandler(file_handler)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Logging system initialized",
        level=log_level,
        format=log_format,
        file=str(log_file) if log_file else None,
        debug=debug
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class MonitorLogger:
    """
    Logger for monitoring runs that carries run-level context on every event.
    """

    def __init__(self, name: str = "monitor"):
        self.logger = structlog.get_logger(name)
        self.context = {}

    def bind_context(self, **kwargs) -> 'MonitorLogger':
        """
        Bind context variables to the logger.

        Args:
            **kwargs: Context variables to bind

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def clear_context(self) -> 'MonitorLogger':
        """Clear all context variables."""
        self.context.clear()
        return self

    def log_run_start(self, total_targets: int, enabled_targets: int) -> None:
        self.logger.info(
            "Starting website change detection",
            total_targets=total_targets,
            enabled_targets=enabled_targets,
            **self.context
        )

    def log_target_start(self, name: str, url: str) -> None:
        self.logger.info("Checking website", name=name, url=url, **self.context)

    def log_result(self, name: str, url: str, state: str, new_hash: Optional[str] = None) -> None:
        """Log the detection outcome for one website."""
        level = "info" if state in ("changed", "first_run") else "debug"
        getattr(self.logger, level)(
            "Website checked",
            name=name,
            url=url,
            state=state,
            hash=new_hash[:16] + "..." if new_hash else None,
            **self.context
        )

    def log_error(self, error: str, url: Optional[str] = None, name: Optional[str] = None) -> None:
        """Log error with context."""
        self.logger.error(
            "Website check failed",
            error=error,
            url=url,
            name=name,
            **self.context
        )

    def log_retry(self, url: str, attempt: int, max_attempts: int, delay: float, error: str) -> None:
        """Log retry attempt."""
        self.logger.warning(
            "Retrying request",
            url=url,
            attempt=attempt,
            max_attempts=max_attempts,
            delay_seconds=delay,
            error=error,
            **self.context
        )

    def log_snapshot_saved(self, key: str, change_count: int, error_count: int) -> None:
        self.logger.debug(
            "Snapshot saved",
            key=key,
            change_count=change_count,
            error_count=error_count,
            **self.context
        )

    def log_run_complete(self, checked: int, changed: int, first_run: int, errors: int, duration_seconds: float) -> None:
        self.logger.info(
            "Website change detection completed",
            checked=checked,
            changed=changed,
            first_run=first_run,
            errors=errors,
            duration_seconds=round(duration_seconds, 3),
            **self.context
        )
