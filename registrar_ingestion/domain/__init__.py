"""Pure domain of the registration ETL (ZERO I/O)."""

from registrar_ingestion.domain.dedup import deduplicate
from registrar_ingestion.domain.events import (
    NULL_SINK,
    CollectingEventSink,
    EventSink,
    NullEventSink,
    Phase,
    PipelineEvent,
)
from registrar_ingestion.domain.extraction import extract_entities
from registrar_ingestion.domain.normalizers import (
    normalize_department,
    normalize_grade,
    normalize_record,
    normalize_year,
    parse_credits,
    parse_date,
)
from registrar_ingestion.domain.transform import transform_records
from registrar_ingestion.domain.types import (
    CourseEntity,
    DepartmentEntity,
    EnrollmentEntity,
    ExtractedEntities,
    LoadSummary,
    NormalizedRecord,
    RawRecord,
    RegistrationOutcome,
    RegistrationStatus,
    RejectedRecord,
    RunSummary,
    StudentEntity,
    TransformResult,
    ValidationResult,
)
from registrar_ingestion.domain.validators import (
    PHONE_POLICIES,
    PhonePolicy,
    RegexPhonePolicy,
    calculate_age,
    get_phone_policy,
    validate_record,
)

__all__ = [
    "NULL_SINK",
    "PHONE_POLICIES",
    "CollectingEventSink",
    "CourseEntity",
    "DepartmentEntity",
    "EnrollmentEntity",
    "EventSink",
    "ExtractedEntities",
    "LoadSummary",
    "NormalizedRecord",
    "NullEventSink",
    "Phase",
    "PhonePolicy",
    "PipelineEvent",
    "RawRecord",
    "RegexPhonePolicy",
    "RegistrationOutcome",
    "RegistrationStatus",
    "RejectedRecord",
    "RunSummary",
    "StudentEntity",
    "TransformResult",
    "ValidationResult",
    "calculate_age",
    "deduplicate",
    "extract_entities",
    "get_phone_policy",
    "normalize_department",
    "normalize_grade",
    "normalize_record",
    "normalize_year",
    "parse_credits",
    "parse_date",
    "transform_records",
    "validate_record",
]
