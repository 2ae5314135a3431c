from fastapi import APIRouter, Query, Response, status
from typing import List, Optional
from rescue_triage.exceptions import handle_service_exceptions
from rescue_triage.schemas.incident import Incident, IncidentStatus
from rescue_triage.services.incident_crud_service import IncidentCRUDService
from rescue_triage.services.incident_lifecycle import IncidentLifecycle
from rescue_triage.services.triage_coordinator import TriageCoordinator
from rescue_triage.shared_models.triage_models import (
	ClassifiedPhotoReportRequest,
	PhotoReportRequest,
	ReclassifyRequest,
	SOSRequest,
)
import logging
router = APIRouter(prefix="/incidents", tags=["incidents"])
logger = logging.getLogger(__name__)


def _set_triage_status(response: Response, incident: Incident):
	# Pending after triage means no resource was assigned yet; operators must look at it.
	if incident.status == IncidentStatus.PENDING:
		response.status_code = status.HTTP_202_ACCEPTED
	else:
		response.status_code = status.HTTP_201_CREATED


@router.get("/", response_model=List[Incident])
@handle_service_exceptions
async def get_incidents(
	incident_status: Optional[IncidentStatus] = Query(default=None, alias="status", description="Only return incidents in this status")
):
	"""
	Get incidents, newest first.
	"""
	return IncidentCRUDService.get_incidents(status=incident_status)

@router.post("/photo-report", response_model=Incident, status_code=status.HTTP_201_CREATED)
@handle_service_exceptions
async def create_photo_report(request: PhotoReportRequest, response: Response):
	"""
	Classify an uploaded scene photo and triage it.

	Returns 201 when resources were assigned and 202 when the incident stays Pending
	(no location, or no eligible resource).
	"""
	incident = await TriageCoordinator.analyze_and_triage(request)
	_set_triage_status(response, incident)
	return incident

@router.post("/photo-report/classified", response_model=Incident, status_code=status.HTTP_201_CREATED)
@handle_service_exceptions
async def create_classified_photo_report(request: ClassifiedPhotoReportRequest, response: Response):
	"""
	Triage a photo report whose oracle text was obtained by the caller.
	"""
	incident = await TriageCoordinator.triage_photo_report(
		request.oracle_raw_text,
		location=TriageCoordinator.location_from(request.lat, request.lng),
		location_note=request.location_address,
		image_url=request.image_url
	)
	_set_triage_status(response, incident)
	return incident

@router.post("/sos", response_model=Incident, status_code=status.HTTP_201_CREATED)
@handle_service_exceptions
async def create_sos(request: SOSRequest, response: Response):
	"""
	Triage an SOS panic signal. A location is mandatory.
	"""
	incident = await TriageCoordinator.triage_sos(
		request.disaster_type_hint,
		TriageCoordinator.location_from(request.lat, request.lng)
	)
	_set_triage_status(response, incident)
	return incident

@router.get("/{incident_id}", response_model=Incident)
@handle_service_exceptions
async def get_incident(incident_id: str):
	"""
	Get an incident by id.
	"""
	return IncidentCRUDService.get_incident(incident_id)

@router.post("/{incident_id}/dispatch", response_model=Incident)
@handle_service_exceptions
async def confirm_dispatch(incident_id: str):
	"""
	Mark an Assigned incident as Dispatched.
	"""
	return IncidentLifecycle.confirm_dispatch(incident_id)

@router.post("/{incident_id}/resolve", response_model=Incident)
@handle_service_exceptions
async def resolve_incident(incident_id: str):
	"""
	Mark a Dispatched incident as Resolved.
	"""
	return IncidentLifecycle.resolve(incident_id)

@router.post("/{incident_id}/reclassify", response_model=Incident)
@handle_service_exceptions
async def reclassify_incident(incident_id: str, request: ReclassifyRequest):
	"""
	Attach a fresh classification to an incident whose classification failed.
	"""
	return await TriageCoordinator.reclassify(incident_id, request.oracle_raw_text)

@router.post("/{incident_id}/rematch", response_model=Incident)
@handle_service_exceptions
async def rematch_incident(incident_id: str):
	"""
	Re-run matching against the current roster.
	"""
	return await TriageCoordinator.rematch(incident_id)
