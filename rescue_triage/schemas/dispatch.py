from typing import List, Optional
from datetime import datetime, timezone
from pydantic import Field
from rescue_triage.schemas.base import BaseSchema
from rescue_triage.schemas.classification import Severity, TeamType
from rescue_triage.schemas.coordinate import Coordinate
from rescue_triage.schemas.incident import IncidentOrigin

class ResourceSnapshot(BaseSchema):
	"""Contact card of an assigned team as it was when the dispatch record was emitted."""
	id: str
	name: str
	team_type: TeamType
	phone: str
	email: Optional[str] = None
	location: Coordinate
	distance_km: float

class DispatchRecord(BaseSchema):
	"""Payload handed to the notification sink. Not persisted."""
	incident_id: str
	# Snapshots in ranking order, nearest first.
	assigned_resources: List[ResourceSnapshot]
	emitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
	origin: IncidentOrigin
	location: Optional[Coordinate] = None
	location_note: Optional[str] = None
	# Classified type for photo reports, or the raw hint for SOS signals.
	disaster_type: Optional[str] = None
	severity: Optional[Severity] = None
	is_reassignment: bool = False
