"""
Unit tests for haversine distance.
"""
import pytest
from rescue_triage.schemas.coordinate import Coordinate
from rescue_triage.utils.geo import haversine_distance_km


class TestHaversineDistance:
	"""Test cases for haversine_distance_km."""

	def test_same_point_is_zero(self):
		"""Test distance from a point to itself is exactly 0.0."""
		point = Coordinate(latitude=32.7266, longitude=74.8570)
		assert haversine_distance_km(point, point) == 0.0

	def test_symmetric(self):
		"""Test distance(a, b) == distance(b, a)."""
		a = Coordinate(latitude=32.7266, longitude=74.8570)
		b = Coordinate(latitude=28.6139, longitude=77.2090)
		assert haversine_distance_km(a, b) == pytest.approx(haversine_distance_km(b, a))

	def test_one_degree_latitude(self):
		"""Test one degree of latitude is about 111.19 km."""
		a = Coordinate(latitude=0.0, longitude=0.0)
		b = Coordinate(latitude=1.0, longitude=0.0)
		assert haversine_distance_km(a, b) == pytest.approx(111.195, abs=0.01)

	def test_monotonic_under_latitude_displacement(self):
		"""Test distance grows as the second point moves further north."""
		origin = Coordinate(latitude=10.0, longitude=20.0)
		distances = [
			haversine_distance_km(origin, Coordinate(latitude=10.0 + step, longitude=20.0))
			for step in (0.1, 0.5, 1.0, 5.0, 20.0)
		]
		assert distances == sorted(distances)
		assert len(set(distances)) == len(distances)

	def test_antipodes(self):
		"""Test antipodal points are half the circumference apart, without math domain errors."""
		a = Coordinate(latitude=0.0, longitude=0.0)
		b = Coordinate(latitude=0.0, longitude=180.0)
		assert haversine_distance_km(a, b) == pytest.approx(20015.09, abs=0.1)

	def test_poles(self):
		"""Test pole to pole distance."""
		north = Coordinate(latitude=90.0, longitude=0.0)
		south = Coordinate(latitude=-90.0, longitude=45.0)
		assert haversine_distance_km(north, south) == pytest.approx(20015.09, abs=0.1)


class TestCoordinate:
	"""Test cases for Coordinate validation."""

	def test_rejects_out_of_range_latitude(self):
		with pytest.raises(ValueError):
			Coordinate(latitude=90.5, longitude=0.0)

	def test_rejects_out_of_range_longitude(self):
		with pytest.raises(ValueError):
			Coordinate(latitude=0.0, longitude=-180.1)

	def test_from_optional_missing_component(self):
		"""Test a missing component means no location."""
		assert Coordinate.from_optional(32.7, None) is None
		assert Coordinate.from_optional(None, None) is None

	def test_from_optional(self):
		assert Coordinate.from_optional(32.7, 74.8) == Coordinate(latitude=32.7, longitude=74.8)

	def test_is_immutable(self):
		point = Coordinate(latitude=1.0, longitude=2.0)
		with pytest.raises(ValueError):
			point.latitude = 3.0
