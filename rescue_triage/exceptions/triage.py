"""
Exceptions raised by the triage engine: oracle text parsing, lifecycle
transitions and the coordinator's failure kinds.
"""
from enum import Enum
from typing import Optional
from fastapi import status
from rescue_triage.exceptions.base import ConflictError, RescueTriageException


class ParseErrorKind(str, Enum):
	UNPARSEABLE = "unparseable"
	SCHEMA_INVALID = "schema_invalid"


class ParseError(RescueTriageException):
	"""
	Raised by ClassificationParser when the oracle text yields no usable classification.
	Maps to HTTP 422, although the coordinator normally rewraps it as a TriageError.
	"""
	def __init__(self, kind: ParseErrorKind, message: str):
		self.kind = kind
		super().__init__(
			message=f"{kind.value}: {message}",
			status_code=status.HTTP_422_UNPROCESSABLE_CONTENT
		)


class TriageErrorKind(str, Enum):
	ORACLE_UNAVAILABLE = "oracle_unavailable"
	ORACLE_TIMEOUT = "oracle_timeout"
	MISSING_LOCATION = "missing_location"
	NO_ELIGIBLE_RESOURCE = "no_eligible_resource"
	INSUFFICIENT_DATA = "insufficient_data"
	PERSISTENCE_CONFLICT = "persistence_conflict"


TRIAGE_ERROR_STATUS_CODES = {
	TriageErrorKind.ORACLE_UNAVAILABLE: status.HTTP_502_BAD_GATEWAY,
	TriageErrorKind.ORACLE_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
	TriageErrorKind.MISSING_LOCATION: status.HTTP_422_UNPROCESSABLE_CONTENT,
	TriageErrorKind.NO_ELIGIBLE_RESOURCE: status.HTTP_409_CONFLICT,
	TriageErrorKind.INSUFFICIENT_DATA: status.HTTP_422_UNPROCESSABLE_CONTENT,
	TriageErrorKind.PERSISTENCE_CONFLICT: status.HTTP_409_CONFLICT,
}


class TriageError(RescueTriageException):
	"""
	A single triage call failed. Carries the kind, the incident it concerns (when one
	was already persisted) and the phase it failed in, so the caller can decide whether
	to retry.
	"""
	def __init__(
		self,
		kind: TriageErrorKind,
		message: str,
		incident_id: Optional[str] = None,
		phase: Optional[str] = None
	):
		self.kind = kind
		self.incident_id = incident_id
		self.phase = phase
		super().__init__(
			message=message,
			status_code=TRIAGE_ERROR_STATUS_CODES[kind],
			detail={
				"kind": kind.value,
				"incident_id": incident_id,
				"phase": phase,
				"message": message,
			}
		)


class InvalidTransitionError(ConflictError):
	"""
	Exception raised when an incident status transition is not allowed from its current status.
	"""
	def __init__(self, incident_id: str, current_status: str, requested_status: str):
		self.incident_id = incident_id
		self.current_status = current_status
		self.requested_status = requested_status
		super().__init__(
			f"Incident '{incident_id}' cannot move from {current_status} to {requested_status}"
		)
