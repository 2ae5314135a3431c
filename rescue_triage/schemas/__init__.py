from rescue_triage.schemas.coordinate import Coordinate
from rescue_triage.schemas.classification import Classification, DisasterType, Severity, TeamType
from rescue_triage.schemas.resource import RescueResource
from rescue_triage.schemas.incident import Incident, IncidentOrigin, IncidentStatus, MatchPhase, TriageFlag
from rescue_triage.schemas.dispatch import DispatchRecord, ResourceSnapshot

__all__ = [
	"Coordinate",
	"Classification",
	"DisasterType",
	"Severity",
	"TeamType",
	"RescueResource",
	"Incident",
	"IncidentOrigin",
	"IncidentStatus",
	"MatchPhase",
	"TriageFlag",
	"DispatchRecord",
	"ResourceSnapshot",
]
