from typing import Optional
from pydantic import ConfigDict, Field
from rescue_triage.schemas.base import BaseSchema

class Coordinate(BaseSchema):
	"""Immutable WGS84 coordinate with latitude and longitude in degrees."""
	model_config = ConfigDict(frozen=True)

	latitude: float = Field(ge=-90, le=90, description="Latitude between -90 and 90")
	longitude: float = Field(ge=-180, le=180, description="Longitude between -180 and 180")

	@classmethod
	def from_optional(cls, latitude: Optional[float], longitude: Optional[float]) -> Optional["Coordinate"]:
		"""
		Build a coordinate from a possibly-missing lat/lng pair.

		Returns:
			Coordinate, or None when either component is missing (user declined geolocation)
		"""
		if latitude is None or longitude is None:
			return None
		return cls(latitude=latitude, longitude=longitude)
