from typing import Any, Dict
import json
from pydantic import BaseModel, ConfigDict

class BaseSchema(BaseModel):
	"""
	Base schema class with JSON-safe serialization/deserialization for Redis storage.
	"""

	model_config = ConfigDict(use_enum_values=False)

	def to_dict(self) -> Dict[str, Any]:
		"""Convert model to a JSON-compatible dictionary (datetimes as ISO strings, enums as values)."""
		return json.loads(self.model_dump_json())

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "BaseSchema":
		"""
		Create model instance from dictionary.

		Pydantic parses ISO datetime strings and enum values on its own, so nested
		records (Coordinate inside Incident, Classification inside Incident) round-trip
		through Redis without per-field handling.
		"""
		return cls.model_validate(data)

	def to_redis_json(self) -> str:
		"""
		Serialize the schema object to a JSON string.

		Usage:
			incident = Incident(...)
			json_str = incident.to_redis_json()  # Returns: '{"id": "...", ...}'
		"""
		return self.model_dump_json()

	@classmethod
	def from_redis_json(cls, json_str: str) -> "BaseSchema":
		"""
		Deserialize a JSON string from Redis back into a schema object.

		Usage:
			incident = Incident.from_redis_json(json_str)
		"""
		return cls.from_dict(json.loads(json_str))
