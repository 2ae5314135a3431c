"""
Service for handing dispatch records to the notification sink.
"""
from typing import Dict, List, Optional
from rescue_triage.config import settings
from rescue_triage.http_client.notification_client import NotificationSinkClient
from rescue_triage.schemas.dispatch import DispatchRecord, ResourceSnapshot
from rescue_triage.schemas.incident import Incident
from rescue_triage.shared_models.triage_models import ResourceMatch
import logging

logger = logging.getLogger(__name__)


class NotificationService:
	"""Builds dispatch records and emits them best-effort."""

	@staticmethod
	def build_dispatch_record(incident: Incident, matches: List[ResourceMatch], is_reassignment: bool = False) -> DispatchRecord:
		"""
		Build the dispatch record for an assigned incident.

		Snapshots follow the incident's assigned_resources order; matches for resources
		no longer assigned are ignored.

		Args:
			incident: The incident after assignment
			matches: Matches that produced the assignment (resource + distance)
			is_reassignment: Whether this replaces an earlier assignment

		Returns:
			DispatchRecord
		"""
		by_id: Dict[str, ResourceMatch] = {match.resource.id: match for match in matches}
		snapshots = []
		for resource_id in incident.assigned_resources:
			match = by_id.get(resource_id)
			if match is None:
				logger.warning(f"No match data for assigned resource {resource_id} of incident {incident.id}")
				continue
			resource = match.resource
			snapshots.append(ResourceSnapshot(
				id=resource.id,
				name=resource.name,
				team_type=resource.team_type,
				phone=resource.phone,
				email=resource.email,
				location=resource.location,
				distance_km=round(match.distance_km, 3)
			))

		classification = incident.classification
		return DispatchRecord(
			incident_id=incident.id,
			assigned_resources=snapshots,
			origin=incident.origin,
			location=incident.location,
			location_note=incident.location_note,
			disaster_type=classification.disaster_type.value if classification else incident.disaster_type_hint,
			severity=classification.severity if classification else None,
			is_reassignment=is_reassignment
		)

	@staticmethod
	async def emit(record: DispatchRecord, client: Optional[NotificationSinkClient] = None) -> bool:
		"""
		Emit a dispatch record to the notification sink.

		Failures are logged and reported through the return value; they are never
		retried here and never raised, since the incident is the source of truth.

		Args:
			record: Dispatch record
			client: Sink client; built from settings when omitted

		Returns:
			True if the sink accepted the record, False otherwise
		"""
		log_fields = {"extra_fields": {"incident_id": record.incident_id, "teams": len(record.assigned_resources)}}

		if client is None and not settings.notification_webhook_url:
			logger.info(f"Dispatch record for incident {record.incident_id}: {record.to_redis_json()}", extra=log_fields)
			return True

		try:
			if client is not None:
				await client.send_dispatch(record)
			else:
				async with NotificationSinkClient() as sink:
					await sink.send_dispatch(record)
			logger.info(f"Dispatch record for incident {record.incident_id} delivered", extra=log_fields)
			return True
		except Exception as e:
			logger.error(f"Failed to emit dispatch record for incident {record.incident_id}: {str(e)}", extra=log_fields)
			return False
