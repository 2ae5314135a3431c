from typing import List
from rescue_triage.exceptions import NotFoundError
from rescue_triage.schemas.resource import RescueResource
from rescue_triage.state import state


class ResourceCRUDService:
	"""Read access to the rescue roster."""

	@staticmethod
	def get_resources(active_only: bool = False) -> List[RescueResource]:
		"""
		Get roster entries ordered by id.

		Args:
			active_only: If true, only return resources that can be matched

		Returns:
			List of RescueResource objects
		"""
		resources = state.list_active_resources() if active_only else state.resources
		return sorted(resources, key=lambda resource: resource.id)

	@staticmethod
	def get_resource(resource_id: str) -> RescueResource:
		resource = state.get_resource(resource_id)
		if resource is None:
			raise NotFoundError("Resource", resource_id)
		return resource
