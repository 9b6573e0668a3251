"""
Run statistics, the console summary and the JSON run report.

``RunReportSink`` is an EventSink: it builds its statistics purely from the
events the pipeline emits, so the same sink works for the batch pipeline
and for single-record registration.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from registrar_kernel.logging_config import get_logger

from registrar_ingestion.domain.events import EventSink, Phase, PipelineEvent

_WIDTH = 60

TABLES = ("departments", "students", "courses", "enrollments")


class RunReportSink:
    """Accumulates run statistics from pipeline events."""

    def __init__(self) -> None:
        self.run_id: str | None = None
        self.source: str | None = None
        self.started_at: datetime | None = None
        self.finished_at: datetime | None = None
        self.status = "running"
        self.extracted = 0
        self.duplicates_removed = 0
        self.validation_errors: list[dict[str, Any]] = []
        self.valid_records = 0
        self.loaded: dict[str, int] = {table: 0 for table in TABLES}
        self.skipped_enrollments = 0
        self.error: str | None = None

    def emit(self, event: PipelineEvent) -> None:
        ctx = event.context
        kind = ctx.get("event")

        if event.phase is Phase.DEDUP:
            self.duplicates_removed += 1
        elif event.phase is Phase.VALIDATION:
            self.validation_errors.append(
                {"rowIndex": ctx.get("row_id"), "errors": list(ctx.get("errors", ()))}
            )
        elif kind == "run_started":
            self.run_id = ctx.get("run_id")
            self.source = ctx.get("source")
            self.started_at = datetime.fromisoformat(ctx["started_at"])
        elif kind == "rows_extracted":
            self.extracted = ctx["count"]
        elif kind == "records_validated":
            self.valid_records = ctx["count"]
        elif kind == "table_loaded":
            self.loaded[ctx["table"]] = ctx["count"]
        elif kind == "enrollment_skipped":
            self.skipped_enrollments += 1
        elif kind == "run_finished":
            self.finished_at = datetime.fromisoformat(ctx["finished_at"])
            self.status = ctx.get("status", self.status)
            self.error = ctx.get("error")

    @property
    def duration_seconds(self) -> float:
        if self.started_at is None or self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def summary(self) -> dict[str, Any]:
        return {
            "extracted": self.extracted,
            "duplicatesRemoved": self.duplicates_removed,
            "validationErrors": len(self.validation_errors),
            "transformedSuccessfully": self.valid_records,
            "loaded": dict(self.loaded),
        }

    def to_report(self) -> dict[str, Any]:
        stamp = self.finished_at or self.started_at
        report: dict[str, Any] = {
            "timestamp": stamp.isoformat() if stamp else None,
            "duration": f"{self.duration_seconds:.2f}",
            "status": self.status,
            "summary": self.summary(),
            "validationErrors": list(self.validation_errors),
        }
        if self.error:
            report["error"] = self.error
        return report

    def render_summary(self) -> str:
        """The boxed console summary printed at the end of a run."""
        rule = "=" * _WIDTH

        def line(text: str = "") -> str:
            return f"| {text}".ljust(_WIDTH - 1) + "|"

        lines = [
            rule,
            line("        ETL PIPELINE SUMMARY"),
            rule,
            line(f"Duration: {self.duration_seconds:.2f}s"),
            line(f"Status: {self.status}"),
            line(f"Extracted: {self.extracted} rows"),
            line(f"Duplicates Removed: {self.duplicates_removed}"),
            line(f"Validation Errors: {len(self.validation_errors)}"),
            line(f"Valid Records: {self.valid_records}"),
            line(),
            line("Loaded to Database:"),
        ]
        lines.extend(line(f"  {table.capitalize()}: {self.loaded[table]}") for table in TABLES)
        if self.skipped_enrollments:
            lines.append(line(f"Skipped Enrollments: {self.skipped_enrollments}"))
        lines.append(rule)
        return "\n".join(lines)

    def write_report(self, directory: Path | str) -> Path:
        """Write ``etl-report-<epoch ms>.json`` into ``directory`` and return its path."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        stamp = self.finished_at or self.started_at or datetime.now()
        path = directory / f"etl-report-{int(stamp.timestamp() * 1000)}.json"
        path.write_text(json.dumps(self.to_report(), indent=2, default=str))
        return path


class LoggingEventSink:
    """Forwards pipeline events to the structured logger."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or get_logger("ingestion.events")

    def emit(self, event: PipelineEvent) -> None:
        level = (
            logging.WARNING
            if event.phase in (Phase.WARN, Phase.VALIDATION)
            else logging.INFO
        )
        self._logger.log(
            level,
            "pipeline_event",
            extra={
                "phase": event.phase.value,
                "detail": event.message,
                "context": dict(event.context),
            },
        )


class FanOutEventSink:
    """Sends each event to every wrapped sink, in order."""

    def __init__(self, *sinks: EventSink):
        self._sinks = sinks

    def emit(self, event: PipelineEvent) -> None:
        for sink in self._sinks:
            sink.emit(event)
