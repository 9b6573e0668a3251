"""
Shared transform: dedup -> normalize -> validate -> extract.

Used unchanged by the batch pipeline and by single-record registration, so
both paths apply exactly the same rules.
"""

from __future__ import annotations

from datetime import date
from typing import Sequence

from registrar_config.schema import RegistrarConfig
from registrar_kernel.domain.clock import SystemClock
from registrar_kernel.exceptions import RecordError, ValidationError

from registrar_ingestion.domain.dedup import deduplicate
from registrar_ingestion.domain.events import NULL_SINK, EventSink, Phase, PipelineEvent
from registrar_ingestion.domain.extraction import extract_entities
from registrar_ingestion.domain.normalizers import normalize_record
from registrar_ingestion.domain.types import (
    NormalizedRecord,
    RawRecord,
    RejectedRecord,
    TransformResult,
)
from registrar_ingestion.domain.validators import (
    get_phone_policy,
    raise_if_invalid,
    validate_record,
)


def transform_records(
    raw: Sequence[RawRecord],
    config: RegistrarConfig,
    sink: EventSink = NULL_SINK,
    today: date | None = None,
) -> TransformResult:
    """
    Turn raw rows into load-ready entities.

    Record-scoped failures (ParseError, ValidationError) exclude the row,
    emit a VALIDATION event and never stop the batch.  Ages are computed
    against ``today``, defaulting to the system clock.
    """
    if today is None:
        today = SystemClock().today()
    phone_policy = get_phone_policy(config.validation.phone_policy)

    sink.emit(
        PipelineEvent(
            Phase.TRANSFORM,
            "Starting transformation...",
            {"event": "transform_started", "count": len(raw)},
        )
    )
    deduplicated = deduplicate(raw, sink)

    valid: list[NormalizedRecord] = []
    rejected: list[RejectedRecord] = []

    for record in deduplicated:
        try:
            normalized = normalize_record(record, config)
            result = validate_record(
                normalized,
                today,
                phone_policy=phone_policy,
                minimum_age=config.validation.minimum_age,
            )
            raise_if_invalid(result, record.row_id)
        except RecordError as e:
            errors = e.errors if isinstance(e, ValidationError) else (str(e),)
            rejected.append(RejectedRecord(row_id=record.row_id, errors=errors))
            sink.emit(
                PipelineEvent(
                    Phase.VALIDATION,
                    f"Row {record.row_id} failed: {', '.join(errors)}",
                    {"row_id": record.row_id, "errors": list(errors), "code": e.code},
                )
            )
            continue
        valid.append(normalized)

    sink.emit(
        PipelineEvent(
            Phase.TRANSFORM,
            f"{len(valid)} records validated successfully",
            {"event": "records_validated", "count": len(valid)},
        )
    )

    entities = extract_entities(valid, config.department_heads)
    counts = entities.counts()
    sink.emit(
        PipelineEvent(
            Phase.TRANSFORM,
            f"Extracted: {counts['departments']} depts, {counts['students']} students, "
            f"{counts['courses']} courses",
            {"event": "entities_extracted", **counts},
        )
    )

    return TransformResult(
        valid=tuple(valid),
        rejected=tuple(rejected),
        entities=entities,
        duplicates_removed=len(raw) - len(deduplicated),
    )
