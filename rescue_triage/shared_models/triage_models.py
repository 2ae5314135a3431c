"""
Request and intermediate models for the triage engine.
"""
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field
from rescue_triage.schemas.incident import MatchPhase
from rescue_triage.schemas.resource import RescueResource


class PhotoReportRequest(BaseModel):
	"""Inbound photo report: an uploaded scene image plus optional reporter location."""
	image_url: str = Field(min_length=1, description="URL of the uploaded scene photograph")
	location_address: Optional[str] = Field(default=None, description="Free-text address typed by the reporter")
	lat: Optional[float] = Field(default=None, description="Reporter latitude, absent if geolocation was declined")
	lng: Optional[float] = Field(default=None, description="Reporter longitude, absent if geolocation was declined")


class ClassifiedPhotoReportRequest(BaseModel):
	"""Photo report whose oracle text was obtained by the caller."""
	oracle_raw_text: str = Field(description="Raw text returned by the classification oracle")
	image_url: Optional[str] = Field(default=None, description="URL of the uploaded scene photograph")
	location_address: Optional[str] = Field(default=None, description="Free-text address typed by the reporter")
	lat: Optional[float] = Field(default=None, description="Reporter latitude")
	lng: Optional[float] = Field(default=None, description="Reporter longitude")


class SOSRequest(BaseModel):
	"""Inbound SOS panic signal. lat/lng are validated by the coordinator, not here."""
	disaster_type_hint: Optional[str] = Field(default=None, description="Disaster type picked on the SOS button, if any")
	lat: Optional[float] = Field(default=None, description="Device latitude")
	lng: Optional[float] = Field(default=None, description="Device longitude")


class ReclassifyRequest(BaseModel):
	oracle_raw_text: str = Field(description="Fresh raw text from the classification oracle")


class ResourceMatch(BaseModel):
	"""A candidate resource and its straight-line distance to the incident."""
	resource: RescueResource
	distance_km: float

	@property
	def rank_key(self) -> Tuple[float, str]:
		"""Total order used for ranking: nearest first, then resource id ascending."""
		return (self.distance_km, self.resource.id)


class MatchResult(BaseModel):
	"""Outcome of the two-phase matching policy."""
	matches: List[ResourceMatch] = Field(default_factory=list)
	# None when neither phase produced a match.
	phase: Optional[MatchPhase] = None

	@property
	def resource_ids(self) -> List[str]:
		return [match.resource.id for match in self.matches]
