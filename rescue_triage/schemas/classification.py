from enum import Enum
from typing import List
from pydantic import ConfigDict, Field
from rescue_triage.schemas.base import BaseSchema


class DisasterType(str, Enum):
	FLOOD = "flood"
	FIRE = "fire"
	EARTHQUAKE = "earthquake"
	COLLAPSE = "collapse"
	MEDICAL = "medical"
	ACCIDENT = "accident"
	LANDSLIDE = "landslide"
	OTHER = "other"


class Severity(str, Enum):
	LOW = "low"
	MEDIUM = "medium"
	HIGH = "high"
	CRITICAL = "critical"


class TeamType(str, Enum):
	NDRF = "NDRF"
	NCC = "NCC"
	FIRE = "Fire"
	POLICE = "Police"
	MEDICAL = "Medical"
	OTHER = "Other"


class Classification(BaseSchema):
	"""Validated scene classification for a photo report. Frozen once built."""
	model_config = ConfigDict(frozen=True)

	# Short description of the scene as reported by the oracle.
	description: str = Field(min_length=1)
	disaster_type: DisasterType
	severity: Severity
	# Team types to match against, in preference order. Filled from the team policy table.
	recommended_team_types: List[TeamType] = Field(default_factory=list)
	reasoning: str = ""
	# The oracle's own team suggestion(s), verbatim. Informational only.
	suggested_teams: List[str] = Field(default_factory=list)
