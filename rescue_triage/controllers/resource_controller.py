from fastapi import APIRouter, Query
from typing import List
from rescue_triage.exceptions import handle_service_exceptions
from rescue_triage.schemas.resource import RescueResource
from rescue_triage.services.resource_crud_service import ResourceCRUDService
router = APIRouter(prefix="/resources", tags=["resources"])

@router.get("/", response_model=List[RescueResource])
@handle_service_exceptions
async def get_resources(
	active_only: bool = Query(default=False, description="If true, return only resources eligible for matching")
):
	"""
	Get the rescue roster.
	"""
	return ResourceCRUDService.get_resources(active_only=active_only)

@router.get("/{resource_id}", response_model=RescueResource)
@handle_service_exceptions
async def get_resource(resource_id: str):
	"""
	Get a roster entry by id.
	"""
	return ResourceCRUDService.get_resource(resource_id)
