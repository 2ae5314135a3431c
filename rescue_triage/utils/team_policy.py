"""
Disaster type to rescue team policy.
Maps a classified disaster type to the team types that should respond, in preference order.
"""
from typing import Dict, List
from rescue_triage.schemas.classification import DisasterType, TeamType


DISASTER_TEAM_POLICY: Dict[DisasterType, List[TeamType]] = {
	DisasterType.FIRE: [TeamType.FIRE],
	DisasterType.COLLAPSE: [TeamType.NDRF, TeamType.FIRE],
	DisasterType.MEDICAL: [TeamType.MEDICAL],
	DisasterType.FLOOD: [TeamType.NDRF, TeamType.NCC],
	DisasterType.EARTHQUAKE: [TeamType.NDRF, TeamType.MEDICAL],
	DisasterType.LANDSLIDE: [TeamType.NDRF],
	DisasterType.ACCIDENT: [TeamType.POLICE, TeamType.MEDICAL],
}

DEFAULT_TEAM_TYPES: List[TeamType] = [TeamType.OTHER]


def recommended_team_types(disaster_type: DisasterType) -> List[TeamType]:
	"""
	Get the team types to dispatch for a disaster type.

	Args:
		disaster_type: Classified disaster type

	Returns:
		New list of team types in preference order; DEFAULT_TEAM_TYPES for unmapped types
	"""
	return list(DISASTER_TEAM_POLICY.get(disaster_type, DEFAULT_TEAM_TYPES))
