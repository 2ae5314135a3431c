from typing import Iterable, List, Optional, Set
from rescue_triage.schemas.classification import TeamType
from rescue_triage.schemas.coordinate import Coordinate
from rescue_triage.schemas.resource import RescueResource
from rescue_triage.shared_models.triage_models import ResourceMatch
from rescue_triage.utils.geo import haversine_distance_km
import logging

logger = logging.getLogger(__name__)


class ResourceMatcher:
	"""Ranks rescue resources by straight-line distance to an incident."""

	@staticmethod
	def is_eligible(resource: RescueResource, required_types: Optional[Set[TeamType]] = None) -> bool:
		"""
		Check whether a resource may be matched.

		Args:
			resource: Roster entry
			required_types: Team types to restrict to, or None for any type

		Returns:
			True if the resource is active and of a required type (when given)
		"""
		if not resource.is_active:
			return False
		if required_types is not None and resource.team_type not in required_types:
			return False
		return True

	@staticmethod
	def nearest(
		origin: Coordinate,
		roster: Iterable[RescueResource],
		k: int,
		required_types: Optional[Iterable[TeamType]] = None
	) -> List[ResourceMatch]:
		"""
		Get the k nearest eligible resources.

		Never falls back to other team types: if no resource of the required types is
		active, the result is empty and the caller decides whether to relax the filter.

		Args:
			origin: Incident location
			roster: Current roster snapshot
			k: Maximum number of matches, must be a positive integer
			required_types: Optional team types to restrict to

		Returns:
			Up to k matches ordered by (distance_km, resource id)

		Raises:
			ValueError: If k is not a positive integer
		"""
		if isinstance(k, bool) or not isinstance(k, int) or k < 1:
			raise ValueError(f"k must be a positive integer, got {k!r}")

		type_filter = set(required_types) if required_types is not None else None

		matches = [
			ResourceMatch(resource=resource, distance_km=haversine_distance_km(origin, resource.location))
			for resource in roster
			if ResourceMatcher.is_eligible(resource, type_filter)
		]
		matches.sort(key=lambda match: match.rank_key)

		logger.debug(f"{len(matches)} eligible resources for {origin}, returning up to {k}")
		return matches[:k]
