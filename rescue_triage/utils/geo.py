"""
Great-circle distance between coordinates.
"""
import math
from rescue_triage.schemas.coordinate import Coordinate

EARTH_RADIUS_KM = 6371.0


def haversine_distance_km(a: Coordinate, b: Coordinate) -> float:
	"""
	Haversine great-circle distance in kilometers.

	Args:
		a: First coordinate
		b: Second coordinate

	Returns:
		Distance in km; exactly 0.0 for identical coordinates, ~20015 km for antipodes
	"""
	if a == b:
		return 0.0

	lat1 = math.radians(a.latitude)
	lat2 = math.radians(b.latitude)
	d_lat = lat2 - lat1
	d_lng = math.radians(b.longitude - a.longitude)

	h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
	# Rounding can push h slightly outside [0, 1] near antipodes
	h = min(1.0, max(0.0, h))
	return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
