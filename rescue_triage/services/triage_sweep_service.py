"""
Periodic sweep that retries matching for incidents the roster could not serve
and refreshes assignments when the roster changed.
"""
from typing import Any, Dict
from rescue_triage.exceptions import RescueTriageException
from rescue_triage.schemas.incident import IncidentStatus, TriageFlag
from rescue_triage.services.triage_coordinator import TriageCoordinator
from rescue_triage.state import state
import logging

logger = logging.getLogger(__name__)


class TriageSweepService:

	@staticmethod
	async def sweep() -> Dict[str, Any]:
		"""
		Rematch Pending incidents flagged no_eligible_resource and all Assigned incidents.

		A failure on one incident is logged and counted; it does not stop the sweep.

		Returns:
			Summary with counts of checked, assigned, reassigned and failed incidents
		"""
		summary = {"checked": 0, "assigned": 0, "reassigned": 0, "unchanged": 0, "failed": 0}

		candidates = [
			incident for incident in state.incidents
			if incident.status == IncidentStatus.ASSIGNED
			or (incident.status == IncidentStatus.PENDING and incident.triage_flag == TriageFlag.NO_ELIGIBLE_RESOURCE)
		]
		logger.info(f"Triage sweep checking {len(candidates)} incidents")

		for incident in candidates:
			summary["checked"] += 1
			try:
				updated = await TriageCoordinator.rematch(incident.id)
			except RescueTriageException as e:
				summary["failed"] += 1
				logger.warning(f"Rematch of incident {incident.id} failed: {e.message}")
				continue
			except Exception as e:
				summary["failed"] += 1
				logger.exception(f"Unexpected error rematching incident {incident.id}: {str(e)}")
				continue

			if updated.version == incident.version:
				summary["unchanged"] += 1
			elif incident.status == IncidentStatus.PENDING:
				summary["assigned"] += 1
			else:
				summary["reassigned"] += 1

		logger.info(f"Triage sweep finished: {summary}")
		return summary
