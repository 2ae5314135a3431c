from rescue_triage.exceptions.base import RescueTriageException, NotFoundError, ValidationError, ConflictError, ServiceError
from rescue_triage.exceptions.triage import (
	ParseError,
	ParseErrorKind,
	TriageError,
	TriageErrorKind,
	InvalidTransitionError,
)
from rescue_triage.exceptions.handler import handle_service_exceptions

__all__ = [
	"RescueTriageException",
	"NotFoundError",
	"ValidationError",
	"ConflictError",
	"ServiceError",
	"ParseError",
	"ParseErrorKind",
	"TriageError",
	"TriageErrorKind",
	"InvalidTransitionError",
	"handle_service_exceptions"
]
