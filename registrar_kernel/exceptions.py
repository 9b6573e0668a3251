"""
Typed exception hierarchy for the registration ETL.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from RegistrarError:

    RegistrarError (base)
    |
    +-- RecordError                 record-scoped: the record is excluded,
    |   +-- ParseError              reported, and the batch continues
    |   +-- ValidationError
    |
    +-- RunError                    run-scoped: the run aborts and the store
        +-- ExtractionError         is left in its pre-run state
        +-- LoadError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category | Code              | When Raised
---------|-------------------|------------------------------------------------
Record   | PARSE_ERROR       | One field cannot be normalized (date, year, ...)
         | VALIDATION_ERROR  | Business-rule violations for one record
---------|-------------------|------------------------------------------------
Run      | EXTRACTION_ERROR  | Source missing, unreadable, or empty
         | LOAD_ERROR        | Store failure inside the load transaction

===============================================================================
HANDLING PATTERNS
===============================================================================

Callers pick a continuation policy by category, never by message:

    try:
        record = normalize_record(raw, config)
    except RecordError as e:
        rejected.append((raw.row_id, [str(e)]))   # keep going
        continue

    try:
        pipeline.run(path)
    except RunError as e:
        return 1                                    # abort, exit non-zero
"""


class RegistrarError(Exception):
    """
    Base exception for all registrar errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "REGISTRAR_ERROR"


# Record-scoped errors


class RecordError(RegistrarError):
    """Base for errors that affect a single record only."""

    code: str = "RECORD_ERROR"


class ParseError(RecordError):
    """A single raw field cannot be normalized."""

    code: str = "PARSE_ERROR"

    def __init__(self, message: str, field: str | None = None, value: object = None):
        self.field = field
        self.value = value
        super().__init__(message)


class ValidationError(RecordError):
    """Aggregated business-rule violations for one record."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, row_id: int | None, errors: list[str] | tuple[str, ...]):
        self.row_id = row_id
        self.errors = tuple(errors)
        super().__init__(
            f"Row {row_id} failed validation: {', '.join(self.errors)}"
        )


# Run-scoped errors


class RunError(RegistrarError):
    """Base for errors that abort the whole run."""

    code: str = "RUN_ERROR"


class ExtractionError(RunError):
    """The upstream data source is unavailable or holds no data rows."""

    code: str = "EXTRACTION_ERROR"

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(message)


class LoadError(RunError):
    """
    The store failed during a load transaction.

    The transaction has been rolled back before this is raised; the
    underlying driver/ORM exception is chained as __cause__.
    """

    code: str = "LOAD_ERROR"

    def __init__(self, message: str, stage: str | None = None):
        self.stage = stage
        super().__init__(message)
