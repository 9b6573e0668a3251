"""
Email-keyed deduplication of raw rows.

When several rows share an email, the most complete one (fewest empty
cells) survives and takes the slot of the first.  Rows without an email
are passed through untouched for validation to reject.
"""

from __future__ import annotations

from typing import Sequence

from registrar_ingestion.domain import types as cols
from registrar_ingestion.domain.events import NULL_SINK, EventSink, Phase, PipelineEvent
from registrar_ingestion.domain.types import RawRecord


def dedup_key(record: RawRecord) -> str | None:
    """Trimmed, lower-cased email, or None when the row has none."""
    email = record.get(cols.EMAIL)
    if email is None:
        return None
    key = str(email).strip().lower()
    return key or None


def deduplicate(
    records: Sequence[RawRecord],
    sink: EventSink = NULL_SINK,
) -> list[RawRecord]:
    """
    Collapse rows sharing an email to one row each.

    A later row replaces the kept one only when it has strictly fewer empty
    cells.  Every collision emits a DEDUP event, whichever row survives.
    """
    result: list[RawRecord] = []
    slot_by_email: dict[str, int] = {}

    for record in records:
        key = dedup_key(record)
        if key is None:
            result.append(record)
            continue

        slot = slot_by_email.get(key)
        if slot is None:
            slot_by_email[key] = len(result)
            result.append(record)
            continue

        kept = result[slot]
        if record.count_empty_fields() < kept.count_empty_fields():
            result[slot] = record
            dropped, kept = kept, record
        else:
            dropped = record

        sink.emit(
            PipelineEvent(
                Phase.DEDUP,
                f"Removed duplicate: {key}",
                {"email": key, "row_id": dropped.row_id, "kept_row_id": kept.row_id},
            )
        )

    return result
