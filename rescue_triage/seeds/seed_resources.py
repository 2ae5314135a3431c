import sys
from pathlib import Path

# Add project root to Python path so we can import from rescue_triage
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import logging
from typing import List

from rescue_triage.schemas.classification import TeamType
from rescue_triage.schemas.coordinate import Coordinate
from rescue_triage.schemas.resource import RescueResource
from rescue_triage.state import state
from rescue_triage.logging_config import setup_logging

# Setup logging
setup_logging(level="INFO")
logger = logging.getLogger(__name__)

# Baseline roster for the Jammu region: (id, name, team type, lat, lng, phone, description)
JAMMU_ROSTER = [
	("ndrf-jammu-1", "NDRF 13th Battalion Jammu", TeamType.NDRF, 32.7357, 74.8691, "011-24363260", "Flood, collapse and earthquake search and rescue"),
	("ncc-jammu-1", "NCC Jammu Group", TeamType.NCC, 32.7185, 74.8580, "0191-2546612", "Volunteer support for evacuation and relief camps"),
	("fire-gandhinagar", "Fire Station Gandhi Nagar", TeamType.FIRE, 32.7090, 74.8626, "101", "Fire fighting and structural rescue"),
	("fire-canal-road", "Fire Station Canal Road", TeamType.FIRE, 32.7397, 74.8489, "101", "Fire fighting and structural rescue"),
	("police-jammu-control", "Jammu Police Control Room", TeamType.POLICE, 32.7305, 74.8647, "100", "Traffic accidents, crowd control and cordoning"),
	("medical-gmc-jammu", "GMC Jammu Emergency", TeamType.MEDICAL, 32.7163, 74.8615, "108", "Ambulance and trauma care"),
	("medical-smgs", "SMGS Hospital Ambulance Unit", TeamType.MEDICAL, 32.7334, 74.8592, "108", "Ambulance and trauma care"),
	("other-sdrf-jk", "SDRF Jammu and Kashmir", TeamType.OTHER, 32.7021, 74.8735, "112", "State disaster response for unclassified emergencies"),
]

def build_roster() -> List[RescueResource]:
	return [
		RescueResource(
			id=resource_id,
			name=name,
			team_type=team_type,
			location=Coordinate(latitude=lat, longitude=lng),
			phone=phone,
			description=description
		)
		for resource_id, name, team_type, lat, lng, phone, description in JAMMU_ROSTER
	]

def load_resources_to_redis(resources: List[RescueResource]):
	for resource in resources:
		state.add_resource(resource)

if __name__ == "__main__":
	logger.info("Seeding rescue resources...")
	resources = build_roster()
	load_resources_to_redis(resources)
	logger.info(f"Successfully loaded {len(resources)} rescue resources to Redis")
