from typing import List, Optional
from rescue_triage.exceptions import NotFoundError
from rescue_triage.schemas.incident import Incident, IncidentStatus
from rescue_triage.state import state
import logging

logger = logging.getLogger(__name__)


class IncidentCRUDService:
	"""Read access to incidents. All writes go through IncidentLifecycle."""

	@staticmethod
	def get_incident(incident_id: str) -> Incident:
		"""
		Get an incident by id.

		Args:
			incident_id: Id of the incident to retrieve

		Returns:
			Incident object

		Raises:
			NotFoundError: If the incident is not found
		"""
		incident = state.get_incident(incident_id)
		if incident is None:
			raise NotFoundError("Incident", incident_id)
		return incident

	@staticmethod
	def get_incidents(status: Optional[IncidentStatus] = None) -> List[Incident]:
		"""
		Get incidents, newest first, optionally filtered by status.

		Args:
			status: Only return incidents in this status

		Returns:
			List of Incident objects
		"""
		incidents = state.incidents if status is None else state.incidents_with_status(status)
		return sorted(incidents, key=lambda incident: incident.created_at, reverse=True)
