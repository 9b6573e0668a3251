"""Ingestion services: extract, load, register, run, report, verify."""

from registrar_ingestion.services.extract_service import read_raw_records
from registrar_ingestion.services.load_coordinator import LoadCoordinator
from registrar_ingestion.services.pipeline import EtlPipeline
from registrar_ingestion.services.registration_service import RegistrationService
from registrar_ingestion.services.run_report import (
    FanOutEventSink,
    LoggingEventSink,
    RunReportSink,
)
from registrar_ingestion.services.verification import (
    sample_enrollments,
    students_per_department,
    table_counts,
)

__all__ = [
    "EtlPipeline",
    "FanOutEventSink",
    "LoadCoordinator",
    "LoggingEventSink",
    "RegistrationService",
    "RunReportSink",
    "read_raw_records",
    "sample_enrollments",
    "students_per_department",
    "table_counts",
]
