"""
Batch ETL pipeline: source file -> transform -> destructive load.

One run is one pass: extract every row, transform them with the shared
transform, and hand the entities to the LoadCoordinator (skipped on a dry
run).  Record-scoped problems are reported and skipped; a RunError aborts
the run after the finish event has been emitted.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from uuid import uuid4

from sqlalchemy.orm import Session

from registrar_config.schema import RegistrarConfig
from registrar_kernel.domain.clock import Clock, SystemClock
from registrar_kernel.exceptions import RunError
from registrar_kernel.logging_config import LogContext, get_logger

from registrar_ingestion.adapters.base import SourceAdapter
from registrar_ingestion.domain.events import NULL_SINK, EventSink, Phase, PipelineEvent
from registrar_ingestion.domain.transform import transform_records
from registrar_ingestion.domain.types import LoadSummary, RunSummary
from registrar_ingestion.services.extract_service import read_raw_records
from registrar_ingestion.services.load_coordinator import LoadCoordinator

logger = get_logger("ingestion.pipeline")


class EtlPipeline:
    """Runs the batch ETL for one source file."""

    def __init__(
        self,
        config: RegistrarConfig,
        session_factory: Callable[[], Session] | None = None,
        sink: EventSink = NULL_SINK,
        clock: Clock | None = None,
    ):
        self._config = config
        self._session_factory = session_factory
        self._sink = sink
        self._clock = clock or SystemClock()

    def run(
        self,
        path: Path | str,
        adapter: SourceAdapter | None = None,
        dry_run: bool = False,
    ) -> RunSummary:
        """
        Execute one run.

        Raises:
            ExtractionError: the source is missing, unreadable or empty.
            LoadError: the load transaction failed and was rolled back.
            ValueError: dry_run is False and no session factory was given.
        """
        if not dry_run and self._session_factory is None:
            raise ValueError("A session factory is required unless dry_run is set")

        run_id = str(uuid4())
        started = self._clock.now()
        source = str(path)

        extracted = 0
        result = None
        loaded: LoadSummary | None = None
        status = "failed"
        error: RunError | None = None

        with LogContext.bind(run_id=run_id, producer="etl"):
            logger.info("etl_run_started", extra={"source": source, "dry_run": dry_run})
            self._sink.emit(
                PipelineEvent(
                    Phase.EXTRACT,
                    f"Started at {started.isoformat()}",
                    {
                        "event": "run_started",
                        "run_id": run_id,
                        "source": source,
                        "started_at": started.isoformat(),
                        "dry_run": dry_run,
                    },
                )
            )
            try:
                raw = read_raw_records(
                    adapter, path, self._config.source.adapter_options(), self._sink
                )
                extracted = len(raw)
                result = transform_records(
                    raw, self._config, self._sink, today=self._clock.today()
                )
                if not dry_run:
                    coordinator = LoadCoordinator(self._session_factory, self._sink)
                    loaded = coordinator.load(result.entities)
                status = "dry_run" if dry_run else "success"
            except RunError as exc:
                error = exc
                logger.error("etl_run_failed", extra={"source": source}, exc_info=True)
                raise
            finally:
                finished = self._clock.now()
                duration = (finished - started).total_seconds()
                summary = RunSummary(
                    run_id=run_id,
                    status=status,
                    extracted=extracted,
                    duplicates_removed=result.duplicates_removed if result else 0,
                    rejected=result.rejected if result else (),
                    valid_records=len(result.valid) if result else 0,
                    loaded=loaded,
                    duration_seconds=duration,
                )
                self._finish(summary, finished.isoformat(), error)

        return summary

    def _finish(self, summary: RunSummary, finished_at: str, error: RunError | None) -> None:
        context = {
            "event": "run_finished",
            "run_id": summary.run_id,
            "status": summary.status,
            "finished_at": finished_at,
            "duration_seconds": summary.duration_seconds,
            "summary": {
                "extracted": summary.extracted,
                "duplicates_removed": summary.duplicates_removed,
                "validation_errors": len(summary.rejected),
                "valid_records": summary.valid_records,
                "loaded": summary.loaded.as_dict() if summary.loaded else None,
            },
        }
        if error is not None:
            context["error"] = str(error)
            context["error_code"] = error.code
        self._sink.emit(
            PipelineEvent(
                Phase.WARN if error is not None else Phase.LOAD,
                f"Finished with status {summary.status} in {summary.duration_seconds:.2f}s",
                context,
            )
        )
        logger.info("etl_run_finished", extra=context)
