"""
Triage coordinator: turns photo reports and SOS signals into incidents, matches
them to the nearest eligible rescue resources and emits the dispatch record.
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional
from pydantic import ValidationError as PydanticValidationError
from rescue_triage.config import settings
from rescue_triage.crews.scene_classification_crew.executor import SceneClassificationExecutor
from rescue_triage.exceptions import NotFoundError, ParseError, TriageError, TriageErrorKind, ValidationError
from rescue_triage.schemas.classification import Classification, TeamType
from rescue_triage.schemas.coordinate import Coordinate
from rescue_triage.schemas.incident import Incident, IncidentOrigin, IncidentStatus, MatchPhase, TriageFlag
from rescue_triage.services.incident_lifecycle import IncidentLifecycle
from rescue_triage.services.notification_service import NotificationService
from rescue_triage.services.resource_matcher import ResourceMatcher
from rescue_triage.shared_models.triage_models import MatchResult, PhotoReportRequest
from rescue_triage.state import state
from rescue_triage.utils.classification_parser import ClassificationParser
from rescue_triage.utils.team_policy import recommended_team_types
import logging

logger = logging.getLogger(__name__)

# A call abandoned on timeout holds its worker until the LLM call returns.
ORACLE_POOL = ThreadPoolExecutor(max_workers=settings.oracle_max_workers, thread_name_prefix="oracle")


class TriageCoordinator:
	"""
	Orchestrates a single triage call. Stateless: every call reads the current
	roster snapshot and writes through the incident store.
	"""

	@staticmethod
	async def triage_photo_report(
		oracle_raw_text: str,
		location: Optional[Coordinate] = None,
		location_note: Optional[str] = None,
		image_url: Optional[str] = None
	) -> Incident:
		"""
		Triage a photo report whose oracle text is already available.

		Args:
			oracle_raw_text: Raw text returned by the classification oracle
			location: Reporter location, None if geolocation was declined
			location_note: Free-text address typed by the reporter
			image_url: URL of the uploaded scene photograph

		Returns:
			The incident, Assigned when resources were matched, Pending otherwise

		Raises:
			TriageError: ORACLE_UNAVAILABLE if the oracle text cannot be parsed; the
				incident is still persisted as Pending and its id is carried on the error
		"""
		try:
			classification = TriageCoordinator._classify(oracle_raw_text)
		except ParseError as e:
			incident = TriageCoordinator._persist_unclassified(location, location_note, image_url)
			logger.warning(
				f"Classification failed for incident {incident.id}: {e.message}",
				extra={"extra_fields": {"incident_id": incident.id, "parse_error": e.kind.value}}
			)
			raise TriageError(
				TriageErrorKind.ORACLE_UNAVAILABLE,
				f"Oracle response could not be used: {e.message}",
				incident_id=incident.id,
				phase="classification"
			) from e

		incident = Incident(
			origin=IncidentOrigin.PHOTO_REPORT,
			location=location,
			location_note=location_note,
			image_url=image_url,
			classification=classification,
			triage_flag=TriageFlag.AWAITING_LOCATION if location is None else None
		)
		TriageCoordinator._persist(incident)
		logger.info(
			f"Created photo incident {incident.id} ({classification.disaster_type.value}, {classification.severity.value})",
			extra={"extra_fields": {"incident_id": incident.id}}
		)

		if location is None:
			logger.info(f"Incident {incident.id} has no location, awaiting operator input")
			return incident

		return await TriageCoordinator._match_and_assign(incident)

	@staticmethod
	async def triage_sos(disaster_type_hint: Optional[str], location: Optional[Coordinate]) -> Incident:
		"""
		Triage an SOS panic signal. Matches the nearest active resources of any type.

		Raises:
			TriageError: MISSING_LOCATION if no location was sent; nothing is persisted
		"""
		if location is None:
			raise TriageError(
				TriageErrorKind.MISSING_LOCATION,
				"SOS signals require a location",
				phase="intake"
			)

		incident = Incident(
			origin=IncidentOrigin.SOS_SIGNAL,
			location=location,
			disaster_type_hint=disaster_type_hint or None
		)
		TriageCoordinator._persist(incident)
		logger.info(f"Created SOS incident {incident.id} at {location.latitude}, {location.longitude}")

		return await TriageCoordinator._match_and_assign(incident)

	@staticmethod
	async def analyze_and_triage(request: PhotoReportRequest) -> Incident:
		"""
		Classify an uploaded photo with the oracle, then triage it.

		The oracle call runs on ORACLE_POOL under ORACLE_TIMEOUT_SECONDS. On
		timeout or failure a Pending incident flagged classification_failed is
		persisted so the report is never dropped.

		Raises:
			TriageError: ORACLE_TIMEOUT or ORACLE_UNAVAILABLE carrying the incident id
		"""
		location = TriageCoordinator.location_from(request.lat, request.lng)

		try:
			loop = asyncio.get_running_loop()
			oracle_raw_text = await asyncio.wait_for(
				loop.run_in_executor(ORACLE_POOL, TriageCoordinator._call_oracle, request.image_url),
				timeout=settings.oracle_timeout_seconds
			)
		except asyncio.TimeoutError as e:
			incident = TriageCoordinator._persist_unclassified(location, request.location_address, request.image_url)
			logger.error(f"Oracle timed out after {settings.oracle_timeout_seconds}s for incident {incident.id}")
			raise TriageError(
				TriageErrorKind.ORACLE_TIMEOUT,
				f"Classification oracle did not answer within {settings.oracle_timeout_seconds} seconds",
				incident_id=incident.id,
				phase="classification"
			) from e
		except Exception as e:
			incident = TriageCoordinator._persist_unclassified(location, request.location_address, request.image_url)
			logger.error(f"Oracle failed for incident {incident.id}: {str(e)}")
			raise TriageError(
				TriageErrorKind.ORACLE_UNAVAILABLE,
				f"Classification oracle unavailable: {str(e)}",
				incident_id=incident.id,
				phase="classification"
			) from e

		return await TriageCoordinator.triage_photo_report(
			oracle_raw_text,
			location=location,
			location_note=request.location_address,
			image_url=request.image_url
		)

	@staticmethod
	async def reclassify(incident_id: str, oracle_raw_text: str) -> Incident:
		"""
		Attach a fresh classification to a photo incident whose classification failed,
		then continue triage.

		Raises:
			NotFoundError: If the incident does not exist
			ValidationError: If the incident is not awaiting classification
			ParseError: If the new text is still unusable; the incident is left as it was
			TriageError: PERSISTENCE_CONFLICT if another writer classified the incident first
		"""
		incident = TriageCoordinator._load(incident_id)
		if incident.status != IncidentStatus.PENDING or incident.triage_flag != TriageFlag.CLASSIFICATION_FAILED:
			raise ValidationError(f"Incident '{incident_id}' is not awaiting classification")

		classification = TriageCoordinator._classify(oracle_raw_text)
		incident = IncidentLifecycle.update_pending(
			incident_id,
			expected_flag=TriageFlag.CLASSIFICATION_FAILED,
			classification=classification,
			triage_flag=TriageFlag.AWAITING_LOCATION if incident.location is None else None
		)
		logger.info(f"Incident {incident_id} reclassified as {classification.disaster_type.value}")

		if incident.location is None:
			return incident
		return await TriageCoordinator._match_and_assign(incident)

	@staticmethod
	async def rematch(incident_id: str) -> Incident:
		"""
		Re-run matching for an incident against a fresh roster snapshot.

		Pending incidents flagged no_eligible_resource are assigned once a match exists.
		Assigned incidents are reassigned, and re-notified, when the ranked resource list
		changed. Every other incident is returned untouched.
		"""
		incident = TriageCoordinator._load(incident_id)

		if incident.status == IncidentStatus.PENDING and incident.triage_flag == TriageFlag.NO_ELIGIBLE_RESOURCE:
			return await TriageCoordinator._match_and_assign(incident)

		if incident.status != IncidentStatus.ASSIGNED:
			return incident

		result = TriageCoordinator.match(incident)
		if not result.matches:
			logger.warning(f"Rematch found no eligible resource for assigned incident {incident_id}, keeping current assignment")
			return incident
		if result.resource_ids == incident.assigned_resources:
			return incident

		logger.info(
			f"Reassigning incident {incident_id}: {incident.assigned_resources} -> {result.resource_ids}",
			extra={"extra_fields": {"incident_id": incident_id, "phase": result.phase.value}}
		)
		incident = IncidentLifecycle.reassign(
			incident_id,
			result.resource_ids,
			match_phase=result.phase,
			expected_version=incident.version
		)
		await TriageCoordinator._emit(incident, result, is_reassignment=True)
		return incident

	@staticmethod
	def match(incident: Incident) -> MatchResult:
		"""
		Two-phase matching policy.

		Photo incidents are first matched against their recommended team types; only if
		that finds nothing is the type filter dropped. SOS incidents carry no
		classification and are matched unrestricted straight away.

		Args:
			incident: Incident with a location

		Returns:
			MatchResult with the phase that produced the matches, or no phase when empty
		"""
		roster = state.list_active_resources()
		required_types = TriageCoordinator._required_types(incident)

		if required_types:
			matches = ResourceMatcher.nearest(incident.location, roster, settings.match_k, required_types)
			if matches:
				return MatchResult(matches=matches, phase=MatchPhase.TYPE_RESTRICTED)
			logger.info(
				f"No active {[t.value for t in required_types]} resource for incident {incident.id}, retrying unrestricted",
				extra={"extra_fields": {"incident_id": incident.id}}
			)

		matches = ResourceMatcher.nearest(incident.location, roster, settings.match_k)
		if matches:
			return MatchResult(matches=matches, phase=MatchPhase.UNRESTRICTED)
		return MatchResult()

	@staticmethod
	def location_from(latitude: Optional[float], longitude: Optional[float]) -> Optional[Coordinate]:
		"""
		Build the incident location from raw request fields.

		Raises:
			ValidationError: If a coordinate is out of range
		"""
		try:
			return Coordinate.from_optional(latitude, longitude)
		except PydanticValidationError as e:
			raise ValidationError(f"Invalid location ({latitude}, {longitude}): {e.errors()[0]['msg']}")

	@staticmethod
	async def _match_and_assign(incident: Incident) -> Incident:
		result = TriageCoordinator.match(incident)

		if not result.matches:
			logger.warning(
				f"No eligible resource for incident {incident.id}",
				extra={"extra_fields": {"incident_id": incident.id, "flag": TriageFlag.NO_ELIGIBLE_RESOURCE.value}}
			)
			if incident.triage_flag == TriageFlag.NO_ELIGIBLE_RESOURCE:
				return incident
			return IncidentLifecycle.mark_flag(incident.id, TriageFlag.NO_ELIGIBLE_RESOURCE, expected_flag=incident.triage_flag)

		incident = IncidentLifecycle.assign(
			incident.id,
			result.resource_ids,
			match_phase=result.phase,
			expected_version=incident.version
		)
		await TriageCoordinator._emit(incident, result)
		return incident

	@staticmethod
	async def _emit(incident: Incident, result: MatchResult, is_reassignment: bool = False) -> bool:
		record = NotificationService.build_dispatch_record(incident, result.matches, is_reassignment=is_reassignment)
		delivered = await NotificationService.emit(record)
		if not delivered:
			logger.warning(f"Incident {incident.id} stays {incident.status.value} although its dispatch record was not delivered")
		return delivered

	@staticmethod
	def _classify(oracle_raw_text: str) -> Classification:
		classification = ClassificationParser.parse(oracle_raw_text)
		return classification.model_copy(
			update={"recommended_team_types": recommended_team_types(classification.disaster_type)}
		)

	@staticmethod
	def _required_types(incident: Incident) -> List[TeamType]:
		if incident.classification is None:
			return []
		return list(incident.classification.recommended_team_types)

	@staticmethod
	def _call_oracle(image_url: str) -> str:
		executor = SceneClassificationExecutor()
		return executor.execute(image_url)

	@staticmethod
	def _persist_unclassified(
		location: Optional[Coordinate],
		location_note: Optional[str],
		image_url: Optional[str]
	) -> Incident:
		incident = Incident(
			origin=IncidentOrigin.PHOTO_REPORT,
			location=location,
			location_note=location_note,
			image_url=image_url,
			triage_flag=TriageFlag.CLASSIFICATION_FAILED
		)
		TriageCoordinator._persist(incident)
		return incident

	@staticmethod
	def _persist(incident: Incident):
		if not state.create_incident(incident):
			raise TriageError(
				TriageErrorKind.PERSISTENCE_CONFLICT,
				f"Incident {incident.id} already exists",
				incident_id=incident.id,
				phase="intake"
			)

	@staticmethod
	def _load(incident_id: str) -> Incident:
		incident = state.get_incident(incident_id)
		if incident is None:
			raise NotFoundError("Incident", incident_id)
		return incident
