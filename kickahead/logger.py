"""
Structured logging system for KickAhead.

Provides centralized logging with console and file outputs, plus counters
for monitoring how ticks are going (executed, ignored, hooked, failed jobs).
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks dispatcher metrics.
    """

    def __init__(
        self,
        name: str = "kickahead",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers.clear()

        self.metrics = self._empty_metrics()

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"kickahead_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

        if not self.logger.handlers:
            self.logger.addHandler(logging.NullHandler())

    @staticmethod
    def _empty_metrics() -> dict:
        return {
            "ticks": 0,
            "jobs_due": 0,
            "jobs_executed": 0,
            "jobs_failed": 0,
            "jobs_ignored": 0,
            "jobs_hooked": 0,
            "out_of_interval": 0,
            "errors_by_type": {},
            "job_type_stats": {},
        }

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_tick(self, due: int):
        """Count a finished pass over the due set."""
        self.metrics["ticks"] += 1
        self.metrics["jobs_due"] += due

    def record_job_attempt(self, job_type: str):
        """Record an attempt to run perform() for a job type."""
        stats = self.metrics["job_type_stats"].setdefault(
            job_type, {"attempts": 0, "successes": 0}
        )
        stats["attempts"] += 1

    def record_job_success(self, job_type: str):
        self.metrics["jobs_executed"] += 1
        if job_type in self.metrics["job_type_stats"]:
            self.metrics["job_type_stats"][job_type]["successes"] += 1

    def record_job_failure(self, job_type: str, error_type: str):
        """Record a job whose perform() or hook raised."""
        self.metrics["jobs_failed"] += 1

        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def record_out_of_time(self, strategy: str):
        """Record how a stale job was handled."""
        key = {
            "ignore": "jobs_ignored",
            "hook": "jobs_hooked",
            "raise_exception": "out_of_interval",
        }[strategy]
        self.metrics[key] += 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = self.metrics.copy()
        for job_type, stats in metrics_copy["job_type_stats"].items():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(
                    stats["successes"] / stats["attempts"], 3
                )

        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Dispatcher Metrics ===")
        self.info(f"Ticks: {metrics['ticks']} (jobs due: {metrics['jobs_due']})")
        self.info(
            f"Executed: {metrics['jobs_executed']} | Failed: {metrics['jobs_failed']} | "
            f"Ignored: {metrics['jobs_ignored']} | Hooked: {metrics['jobs_hooked']} | "
            f"Out of interval: {metrics['out_of_interval']}"
        )

        if metrics["job_type_stats"]:
            self.info("Job Type Success Rates:")
            for job_type, stats in metrics["job_type_stats"].items():
                rate = stats.get("success_rate", 0) * 100
                self.info(f"  {job_type}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "kickahead",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
