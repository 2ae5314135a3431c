import logging
from typing import Any, List, Optional
from datetime import datetime, timezone
from rescue_triage.redis_client import RescueRedis, rescue_redis
from rescue_triage.schemas.incident import Incident, IncidentStatus
from rescue_triage.schemas.resource import RescueResource
logger = logging.getLogger(__name__)

class State:
	"""
	Persistence boundary for the triage engine, backed by Redis.

	Incidents are stored under 'incident:<id>' and roster entries under
	'resource:<id>'. Nothing is cached in memory: every property reads the
	current records, so each triage call works on a fresh roster snapshot.
	"""

	REDIS_INCIDENT_KEY_PREFIX = "incident:"
	REDIS_RESOURCE_KEY_PREFIX = "resource:"

	def __init__(self, redis_client: Optional[RescueRedis] = None):
		self._redis = redis_client or rescue_redis

	# Roster boundary

	@property
	def resources(self) -> List[RescueResource]:
		"""
		Getter for the whole roster, active or not.
		Usage: resources = state.resources
		"""
		resource_keys = self._redis.get_all_keys(f"{State.REDIS_RESOURCE_KEY_PREFIX}*")
		return self._redis.read_all_as_schema(resource_keys, RescueResource, "resource")

	def list_active_resources(self) -> List[RescueResource]:
		"""Read-only roster query used for matching."""
		return [resource for resource in self.resources if resource.is_active]

	def get_resource(self, resource_id: str) -> Optional[RescueResource]:
		redis_key = f"{State.REDIS_RESOURCE_KEY_PREFIX}{resource_id}"
		return self._redis.read_as_schema(redis_key, RescueResource, "resource")

	def add_resource(self, resource: RescueResource):
		"""Create or overwrite a roster entry (seeding and administration only)."""
		redis_key = f"{State.REDIS_RESOURCE_KEY_PREFIX}{resource.id}"
		self._redis.create(redis_key, resource.to_dict())

	# Incident store boundary

	@property
	def incidents(self) -> List[Incident]:
		"""
		Getter for incidents.
		Usage: incidents = state.incidents
		"""
		incident_keys = self._redis.get_all_keys(f"{State.REDIS_INCIDENT_KEY_PREFIX}*")
		return self._redis.read_all_as_schema(incident_keys, Incident, "incident")

	def incidents_with_status(self, status: IncidentStatus) -> List[Incident]:
		return [incident for incident in self.incidents if incident.status == status]

	def create_incident(self, incident: Incident) -> bool:
		"""
		Persist a new incident.

		Returns:
			True if created, False if an incident with the same id already exists
		"""
		redis_key = f"{State.REDIS_INCIDENT_KEY_PREFIX}{incident.id}"
		return self._redis.create_if_absent(redis_key, incident.to_dict())

	def get_incident(self, incident_id: str) -> Optional[Incident]:
		"""Get an incident by id."""
		redis_key = f"{State.REDIS_INCIDENT_KEY_PREFIX}{incident_id}"
		return self._redis.read_as_schema(redis_key, Incident, "incident")

	def update_incident_status(
		self,
		incident_id: str,
		expected_status: IncidentStatus,
		new_status: IncidentStatus,
		assigned_resources: Optional[List[str]] = None,
		expected_version: Optional[int] = None,
		**changes: Any
	) -> bool:
		"""
		Compare-and-swap an incident's status.

		The write happens only if the stored incident still has expected_status (and
		expected_version, when given). The version is bumped on every successful write.

		Args:
			incident_id: Incident id
			expected_status: Status the caller last observed
			new_status: Status to move to
			assigned_resources: Replacement resource list, or None to keep the current one
			expected_version: Version the caller last observed
			**changes: Other Incident fields to replace in the same write

		Returns:
			True on success, False on conflict or if the incident does not exist
		"""
		redis_key = f"{State.REDIS_INCIDENT_KEY_PREFIX}{incident_id}"
		current = self.get_incident(incident_id)
		if current is None:
			return False
		if current.status != expected_status or (expected_version is not None and current.version != expected_version):
			return False

		update = dict(changes)
		update["status"] = new_status
		update["version"] = current.version + 1
		update["updated_at"] = datetime.now(timezone.utc)
		if assigned_resources is not None:
			update["assigned_resources"] = list(assigned_resources)
		updated = current.evolve(**update)

		def still_current(stored: Optional[dict]) -> bool:
			return (
				stored is not None
				and stored.get("status") == expected_status.value
				and stored.get("version") == current.version
			)

		return self._redis.compare_and_set(redis_key, still_current, updated.to_dict())

# Global state instance
state = State()
