"""
Logging module - JSON Lines based logging for extraction runs.

Logging Levels:
- Level 1: High-level phases (resolution, extraction)
- Level 2: Steps within phases (one per module)
- Level 3: Detailed item-level logging (each module, parsed file, component)

Log files are stored in: {logs_dir}/run_{id}/log_{datetime}.jsonl

Standard ``logging`` records can be forwarded into the run log with
setup_logging_bridge, so parser warnings end up next to the run's entries.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

__all__ = [
    "LogLevel",
    "LogStatus",
    "LogEntry",
    "RunLogger",
    "StepContext",
    "RunLoggerHandler",
    "configure_logging",
    "new_run_id",
    "read_run_logs",
    "setup_logging_bridge",
    "teardown_logging_bridge",
]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = logging.WARNING) -> None:
    """
    Configure standard logging for command line use.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or numeric level; unknown
            names fall back to WARNING
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def new_run_id() -> str:
    """Generate a run id from the current time."""
    return datetime.now().strftime("%Y%m%d%H%M%S%f")


class LogLevel(int, Enum):
    """Log levels for filtering."""

    PHASE = 1
    STEP = 2
    DETAIL = 3


class LogStatus(str, Enum):
    """Status values for log entries."""

    STARTED = "started"
    COMPLETED = "completed"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass
class LogEntry:
    """A single log entry."""

    level: int
    phase: str
    status: str
    timestamp: str
    message: str
    step: str | None = None
    sequence: int | None = None
    duration_ms: int | None = None
    items_processed: int | None = None
    items_created: int | None = None
    items_failed: int | None = None
    stats: dict[str, Any] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        return {
            k: v.value if isinstance(v, Enum) else v
            for k, v in asdict(self).items()
            if v is not None
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def _read_entries(log_file: Path, level: int | None) -> list[dict[str, Any]]:
    entries = []
    with open(log_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue
            if level is None or entry.get("level") == level:
                entries.append(entry)
    return entries


def _elapsed_ms(start: datetime) -> int:
    return int((datetime.now() - start).total_seconds() * 1000)


class RunLogger:
    """
    Logger for a single extraction run.

    Creates and appends to a JSONL file in {logs_dir}/run_{id}/.
    """

    def __init__(self, run_id: str | None = None, logs_dir: str | Path = "logs"):
        """
        Initialize logger for a run.

        Args:
            run_id: Run identifier (defaults to a timestamp)
            logs_dir: Base directory for logs, relative to the working directory
        """
        self.run_id = run_id or new_run_id()
        self.run_dir = Path(logs_dir) / f"run_{self.run_id}"
        self.run_dir.mkdir(parents=True, exist_ok=True)

        self.start_time = datetime.now()
        self.log_file = self.run_dir / f"log_{self.start_time:%Y%m%d_%H%M%S}.jsonl"

        self._current_phase: str | None = None
        self._phase_start: datetime | None = None
        self._step_sequence = 0

    def _write_entry(self, entry: LogEntry) -> None:
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(entry.to_json() + "\n")

    def _log(
        self,
        level: LogLevel,
        status: LogStatus,
        message: str,
        phase: str | None = None,
        **fields: Any,
    ) -> None:
        """Write one entry, defaulting the phase to the current phase."""
        self._write_entry(
            LogEntry(
                level=level,
                phase=phase or self._current_phase or "unknown",
                status=status,
                timestamp=datetime.now().isoformat(),
                message=message,
                **fields,
            )
        )

    def _end_phase(self, phase: str) -> int | None:
        duration = None
        if self._phase_start and self._current_phase == phase:
            duration = _elapsed_ms(self._phase_start)
        self._current_phase = None
        self._phase_start = None
        return duration

    # ==================== Level 1: Phase Logging ====================

    def phase_start(self, phase: str, message: str = "") -> None:
        """Log the start of a phase and make it the current phase."""
        self._current_phase = phase
        self._phase_start = datetime.now()
        self._step_sequence = 0
        self._log(LogLevel.PHASE, LogStatus.STARTED, message or f"Starting {phase}", phase)

    def phase_complete(
        self, phase: str, message: str = "", stats: dict[str, Any] | None = None
    ) -> None:
        """Log the completion of a phase with optional summary statistics."""
        duration = self._end_phase(phase)
        self._log(
            LogLevel.PHASE,
            LogStatus.COMPLETED,
            message or f"Completed {phase}",
            phase,
            duration_ms=duration,
            stats=stats,
        )

    def phase_error(self, phase: str, error: str, message: str = "") -> None:
        """Log a phase error."""
        duration = self._end_phase(phase)
        self._log(
            LogLevel.PHASE,
            LogStatus.ERROR,
            message or f"Error in {phase}",
            phase,
            duration_ms=duration,
            error=error,
        )

    # ==================== Level 2: Step Logging ====================

    def step_start(self, step: str, message: str = "") -> StepContext:
        """
        Log the start of a step within the current phase.

        Args:
            step: Step name (a module name)
            message: Optional message

        Returns:
            StepContext that logs completion or failure on exit
        """
        self._step_sequence += 1
        self._log(
            LogLevel.STEP,
            LogStatus.STARTED,
            message or f"Starting {step}",
            step=step,
            sequence=self._step_sequence,
        )
        return StepContext(self, step, self._step_sequence)

    def step_complete(
        self,
        step: str,
        sequence: int,
        message: str = "",
        items_processed: int = 0,
        items_created: int = 0,
        items_failed: int = 0,
        duration_ms: int | None = None,
        stats: dict[str, Any] | None = None,
    ) -> None:
        """
        Log the completion of a step.

        Args:
            step: Step name
            sequence: Step sequence number
            message: Optional message
            items_processed: Number of files processed
            items_created: Number of components extracted
            items_failed: Number of files that failed
            duration_ms: Duration in milliseconds
            stats: Optional detailed statistics
        """
        self._log(
            LogLevel.STEP,
            LogStatus.COMPLETED,
            message or f"Completed {step}",
            step=step,
            sequence=sequence,
            duration_ms=duration_ms,
            items_processed=items_processed,
            items_created=items_created,
            items_failed=items_failed,
            stats=stats,
        )

    def step_error(
        self,
        step: str,
        sequence: int,
        error: str,
        message: str = "",
        duration_ms: int | None = None,
    ) -> None:
        """Log a step error."""
        self._log(
            LogLevel.STEP,
            LogStatus.ERROR,
            message or f"Error in {step}",
            step=step,
            sequence=sequence,
            duration_ms=duration_ms,
            error=error,
        )

    # ==================== Level 3: Detail Logging ====================

    def detail_module_resolved(
        self, module_name: str, path: str, extends: str | None = None
    ) -> None:
        """Log a resolved module and the base config it extends, if any."""
        stats: dict[str, Any] = {"module": module_name, "path": path}
        if extends:
            stats["extends"] = extends
        self._log(
            LogLevel.DETAIL,
            LogStatus.COMPLETED,
            f"Resolved module: {module_name}",
            self._current_phase or "resolution",
            stats=stats,
        )

    def detail_file_parsed(self, file_path: str, language: str | None) -> None:
        self._log(
            LogLevel.DETAIL,
            LogStatus.COMPLETED,
            f"Parsed: {file_path}",
            self._current_phase or "extraction",
            stats={"file_path": file_path, "language": language},
        )

    def detail_file_skipped(self, file_path: str, reason: str) -> None:
        self._log(
            LogLevel.DETAIL,
            LogStatus.SKIPPED,
            f"Skipped: {file_path}",
            self._current_phase or "extraction",
            stats={"file_path": file_path, "reason": reason},
        )

    def detail_component_extracted(
        self,
        component_type: str,
        name: str,
        domain: str,
        file_path: str,
        line: int,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """
        Log an extracted component.

        Args:
            component_type: Built-in or custom component type
            name: Component name
            domain: Owning module
            file_path: Source file path
            line: Declaration line
            metadata: Optional extracted field values
        """
        stats: dict[str, Any] = {
            "component_type": component_type,
            "name": name,
            "domain": domain,
            "file_path": file_path,
            "line": line,
        }
        if metadata:
            stats["metadata"] = metadata
        self._log(
            LogLevel.DETAIL,
            LogStatus.COMPLETED,
            f"Extracted {component_type}: {name}",
            self._current_phase or "extraction",
            stats=stats,
        )

    # ==================== Utility Methods ====================

    def get_log_path(self) -> Path:
        return self.log_file

    def read_logs(self, level: int | None = None) -> list[dict[str, Any]]:
        """Read this run's entries, optionally only those of one level."""
        if not self.log_file.exists():
            return []
        return _read_entries(self.log_file, level)


class StepContext:
    """
    Context manager for tracking step duration and completion.

    Usage:
        with run_logger.step_start("orders") as step:
            step.items_processed = len(files)
            step.items_created = len(components)
    """

    def __init__(self, logger: RunLogger, step: str, sequence: int):
        self.logger = logger
        self.step = step
        self.sequence = sequence
        self.start_time = datetime.now()
        self.items_processed = 0
        self.items_created = 0
        self.items_failed = 0
        self.stats: dict[str, Any] | None = None
        self._completed = False

    def __enter__(self) -> StepContext:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.error(str(exc_val))
        elif not self._completed:
            self.complete()

    def complete(self, message: str = "") -> None:
        """Mark step as completed."""
        self._completed = True
        self.logger.step_complete(
            step=self.step,
            sequence=self.sequence,
            message=message,
            items_processed=self.items_processed,
            items_created=self.items_created,
            items_failed=self.items_failed,
            duration_ms=_elapsed_ms(self.start_time),
            stats=self.stats,
        )

    def error(self, error: str, message: str = "") -> None:
        """Mark step as errored."""
        self._completed = True
        self.logger.step_error(
            step=self.step,
            sequence=self.sequence,
            error=error,
            message=message,
            duration_ms=_elapsed_ms(self.start_time),
        )


def read_run_logs(
    run_id: str, logs_dir: str | Path = "logs", level: int | None = None
) -> list[dict[str, Any]]:
    """
    Read the most recent log file of a run.

    Returns:
        List of log entries, or empty list if no logs found
    """
    run_dir = Path(logs_dir) / f"run_{run_id}"
    log_files = sorted(run_dir.glob("log_*.jsonl"), reverse=True) if run_dir.exists() else []
    if not log_files:
        return []
    return _read_entries(log_files[0], level)


# =============================================================================
# Standard Logging Bridge
# =============================================================================


class RunLoggerHandler(logging.Handler):
    """Forwards standard logging records to a RunLogger as detail entries."""

    def __init__(self, run_logger: RunLogger, min_level: int = logging.WARNING):
        super().__init__(level=min_level)
        self.run_logger = run_logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            is_error = record.levelno >= logging.WARNING
            self.run_logger._log(
                LogLevel.DETAIL,
                LogStatus.ERROR if is_error else LogStatus.COMPLETED,
                message,
                self.run_logger._current_phase or "system",
                error=message if is_error else None,
                stats={
                    "logger": record.name,
                    "level": record.levelname,
                    "module": record.module,
                    "funcName": record.funcName,
                    "lineno": record.lineno,
                },
            )
        except Exception:
            self.handleError(record)


def setup_logging_bridge(
    run_logger: RunLogger,
    min_level: int = logging.WARNING,
    logger_names: list[str] | None = None,
) -> RunLoggerHandler:
    """
    Bridge standard logging into a RunLogger.

    Args:
        run_logger: The RunLogger to forward records to
        min_level: Minimum level to forward
        logger_names: Loggers to attach to (default: the root logger)

    Returns:
        The handler, to pass to teardown_logging_bridge
    """
    handler = RunLoggerHandler(run_logger, min_level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    for name in logger_names or [""]:
        logging.getLogger(name or None).addHandler(handler)
    return handler


def teardown_logging_bridge(
    handler: RunLoggerHandler, logger_names: list[str] | None = None
) -> None:
    """Detach a handler returned by setup_logging_bridge."""
    for name in logger_names or [""]:
        logging.getLogger(name or None).removeHandler(handler)
