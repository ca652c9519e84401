"""Structured logging for generation runs.

Provides consistent logging with:
- Timestamps
- Log levels (DEBUG, INFO, WARNING, ERROR)
- Per-run context (generation type, model ladder, attempts)
- Structured key=value data
- Optional per-run log files

One GenerationLogger is shared by every run. Per-run state (start time, log
file) lives in the RunContext returned by start_generation, and a run's file
only receives records emitted from that run's own task.
"""

import itertools
import logging
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

_current_run: ContextVar[int | None] = ContextVar("cardgen_current_run", default=None)
_run_ids = itertools.count(1)


@dataclass
class RunContext:
    """State of one generation run, owned by the caller of start_generation."""

    run_id: int
    generation_type: str
    started_at: float
    log_file: Path | None = None
    file_handler: logging.FileHandler | None = None

    @property
    def elapsed(self) -> str:
        return f"{time.time() - self.started_at:.1f}s"


class _RunFilter(logging.Filter):
    """Accepts only records emitted while the given run is current."""

    def __init__(self, run_id: int):
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        return _current_run.get() == self.run_id


class GenerationLogger:
    """Structured logger for the generation pipeline."""

    def __init__(self, name: str = "cardgen", verbose: bool = False, log_dir: str | Path | None = None):
        """Initialize the logger.

        Args:
            name: Logger name.
            verbose: If True, show DEBUG level logs on the console.
            log_dir: Directory for per-run log files. If None, no file logging.
        """
        self.logger = logging.getLogger(name)
        self.verbose = verbose
        self._log_dir = Path(log_dir) if log_dir else None

        if not self.logger.handlers:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(ConsoleFormatter())
            console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
            self.logger.addHandler(console_handler)

        self.logger.setLevel(logging.DEBUG)

    def set_verbose(self, verbose: bool):
        """Update verbose setting on the console handler."""
        self.verbose = verbose
        for handler in self.logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(logging.DEBUG if verbose else logging.INFO)

    def _ts(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _open_run_file(self, run: RunContext):
        self._log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        run.log_file = self._log_dir / f"{run.generation_type}_{timestamp}_{run.run_id}.log"
        handler = logging.FileHandler(run.log_file, encoding="utf-8")
        handler.setFormatter(FileFormatter())
        handler.setLevel(logging.DEBUG)
        handler.addFilter(_RunFilter(run.run_id))
        self.logger.addHandler(handler)
        run.file_handler = handler

    def start_generation(
        self,
        generation_type: str,
        models: list[str],
        batch_mode: bool = False,
        refinement: bool = False,
    ) -> RunContext:
        """Mark the start of a run and open its log file if configured.

        Returns:
            The run's context. Pass it to end_generation and close_run.
        """
        run = RunContext(run_id=next(_run_ids), generation_type=generation_type, started_at=time.time())
        _current_run.set(run.run_id)
        if self._log_dir:
            self._open_run_file(run)

        mode = "refinement" if refinement else ("batch" if batch_mode else "single")
        ladder = " -> ".join(_short_model(m) for m in models)
        self.logger.info(f"[{self._ts()}] Generating {generation_type} ({mode}) | ladder: {ladder}")
        return run

    def attempt(self, model: str, model_index: int, model_count: int, attempt: int, max_attempts: int):
        """Log the start of a model call."""
        self.debug(
            f"Trying model {_short_model(model)} ({model_index + 1}/{model_count}), "
            f"attempt {attempt + 1}/{max_attempts}"
        )

    def attempt_failed(self, model: str, failure_class: str, exc: Exception):
        """Log a failed attempt with its classification."""
        self.warning(f"{_short_model(model)} failed [{failure_class}]", error=f"{type(exc).__name__}: {exc}")

    def fallback(self, from_model: str, to_model: str, reason: str):
        """Log a move down the model ladder."""
        self.logger.info(f"  -> falling back {_short_model(from_model)} -> {_short_model(to_model)} ({reason})")

    def end_generation(
        self,
        run: RunContext,
        success: bool,
        model: str | None = None,
        items: int = 0,
        stats: dict | None = None,
    ):
        """Log the outcome of a run."""
        if success:
            self.logger.info(
                f"  Done: {items} item{'s' if items != 1 else ''} "
                f"from {_short_model(model or '')} [{run.elapsed}]"
            )
        else:
            self.logger.error(f"[{self._ts()}] Generation FAILED [{run.elapsed}]")
        if stats:
            self.summary(stats)

    def close_run(self, run: RunContext):
        """Detach and close the run's log file. Safe to call more than once."""
        if run.file_handler:
            self.logger.info(f"Log: {run.log_file}")
            self.logger.removeHandler(run.file_handler)
            run.file_handler.close()
            run.file_handler = None
        if _current_run.get() == run.run_id:
            _current_run.set(None)

    def debug(self, message: str, **data):
        """Log debug message (only shown in verbose mode)."""
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.debug(f"[{self._ts()}] {message}")

    def warning(self, message: str, **data):
        """Log warning message."""
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.warning(f"[{self._ts()}] WARN: {message}")

    def summary(self, stats: dict):
        """Log a summary block."""
        lines = ["SUMMARY"]
        for key, value in stats.items():
            if isinstance(value, dict):
                lines.append(f"  {key}:")
                for k, v in value.items():
                    lines.append(f"    {k}: {v}")
            else:
                lines.append(f"  {key}: {value}")
        self.logger.info("\n".join(lines))


class ConsoleFormatter(logging.Formatter):
    """Console formatter: the message only, timestamps are added by the logger."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


class FileFormatter(logging.Formatter):
    """File formatter with full timestamp and level."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        level = record.levelname[:4]
        return f"{ts} [{level}] {record.getMessage()}"


def _short_model(model: str) -> str:
    return model.split("/")[-1] if "/" in model else model


def _format_data(data: dict[str, Any]) -> str:
    """Format structured data for logging."""
    parts = []
    for k, v in data.items():
        if isinstance(v, str) and len(v) > 120:
            v = v[:117] + "..."
        elif isinstance(v, list) and len(v) > 5:
            v = f"[{len(v)} items]"
        parts.append(f"{k}={v}")
    return ", ".join(parts)


# Global logger instance
_logger: GenerationLogger | None = None


def get_logger(verbose: bool = False, log_dir: str | Path | None = None) -> GenerationLogger:
    """Get or create the global generation logger.

    Args:
        verbose: If True, show DEBUG level logs on the console.
        log_dir: Directory for per-run log files. Applied to an existing
                 logger if it has none yet.
    """
    global _logger
    if _logger is None:
        _logger = GenerationLogger(verbose=verbose, log_dir=log_dir)
    else:
        if verbose and not _logger.verbose:
            _logger.set_verbose(True)
        if log_dir and not _logger._log_dir:
            _logger._log_dir = Path(log_dir)
    return _logger


def reset_logger():
    """Reset the global logger (for testing)."""
    global _logger
    if _logger:
        for handler in _logger.logger.handlers[:]:
            if isinstance(handler, logging.FileHandler):
                handler.close()
            _logger.logger.removeHandler(handler)
    _logger = None
