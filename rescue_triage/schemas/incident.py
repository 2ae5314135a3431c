import uuid
from enum import Enum
from typing import Any, List, Optional
from datetime import datetime, timezone
from pydantic import Field, model_validator
from rescue_triage.schemas.base import BaseSchema
from rescue_triage.schemas.classification import Classification
from rescue_triage.schemas.coordinate import Coordinate


class IncidentOrigin(str, Enum):
	PHOTO_REPORT = "PhotoReport"
	SOS_SIGNAL = "SOSSignal"


class IncidentStatus(str, Enum):
	PENDING = "Pending"
	ASSIGNED = "Assigned"
	DISPATCHED = "Dispatched"
	RESOLVED = "Resolved"


class TriageFlag(str, Enum):
	"""Why a Pending incident has not advanced."""
	NO_ELIGIBLE_RESOURCE = "no_eligible_resource"
	CLASSIFICATION_FAILED = "classification_failed"
	AWAITING_LOCATION = "awaiting_location"


class MatchPhase(str, Enum):
	TYPE_RESTRICTED = "type_restricted"
	UNRESTRICTED = "unrestricted"


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


class Incident(BaseSchema):
	id: str = Field(default_factory=lambda: str(uuid.uuid4()))
	origin: IncidentOrigin
	# Absent when the reporter declined geolocation.
	location: Optional[Coordinate] = None
	# Free-text address the reporter typed in, if any.
	location_note: Optional[str] = None
	# Reference to the uploaded scene photo (PhotoReport only).
	image_url: Optional[str] = None
	# PhotoReport only.
	classification: Optional[Classification] = None
	# SOSSignal only.
	disaster_type_hint: Optional[str] = None
	status: IncidentStatus = IncidentStatus.PENDING
	# Resource ids in ranking order, nearest first.
	assigned_resources: List[str] = Field(default_factory=list)
	# Which matching phase produced assigned_resources.
	match_phase: Optional[MatchPhase] = None
	triage_flag: Optional[TriageFlag] = None
	# Bumped on every persisted transition; paired with status for compare-and-swap.
	version: int = 0
	created_at: datetime = Field(default_factory=_utcnow)
	updated_at: Optional[datetime] = None

	@model_validator(mode="after")
	def check_invariants(self) -> "Incident":
		if self.origin == IncidentOrigin.SOS_SIGNAL:
			if self.classification is not None:
				raise ValueError("SOS incidents never carry a classification")
			if self.image_url is not None:
				raise ValueError("SOS incidents never carry an image")
		else:
			if self.disaster_type_hint is not None:
				raise ValueError("Photo report incidents carry a classification, not a disaster type hint")
			if self.classification is None and not (
				self.status == IncidentStatus.PENDING
				and self.triage_flag == TriageFlag.CLASSIFICATION_FAILED
			):
				raise ValueError("Photo report incidents require a classification unless classification failed and the incident is Pending")

		if self.location is None:
			if self.assigned_resources:
				raise ValueError("An incident without a location cannot have assigned resources")
			if self.status != IncidentStatus.PENDING:
				raise ValueError("An incident without a location cannot advance past Pending")

		if len(set(self.assigned_resources)) != len(self.assigned_resources):
			raise ValueError("assigned_resources must not contain duplicates")
		return self

	def evolve(self, **changes: Any) -> "Incident":
		"""Return a re-validated copy with the given fields replaced."""
		data = self.model_dump()
		data.update(changes)
		return type(self).model_validate(data)
