from typing import Optional
from rescue_triage.schemas.base import BaseSchema
from rescue_triage.schemas.classification import TeamType
from rescue_triage.schemas.coordinate import Coordinate

class RescueResource(BaseSchema):
	# Roster identifier, also the tie-break key when two teams are equally near.
	id: str
	# Display name of the team.
	name: str
	team_type: TeamType
	# Base location of the team.
	location: Coordinate
	phone: str
	email: Optional[str] = None
	# What the team handles, shown to operators next to the contact details.
	description: Optional[str] = None
	# Inactive teams are never matched.
	is_active: bool = True
