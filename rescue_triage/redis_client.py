import json
import redis
import logging
from typing import Optional, Any, Callable, Dict, TypeVar, Type
from rescue_triage.config import settings

logger = logging.getLogger(__name__)

T = TypeVar('T')

class RescueRedis:
	"""
	Generalized Redis client wrapper for basic CRUD operations.
	Handles JSON serialization/deserialization automatically.
	"""

	def __init__(self, client: Optional[redis.Redis] = None):
		self.client = client or redis.Redis(
			host=settings.redis_host,
			port=settings.redis_port,
			db=settings.redis_db,
			password=settings.redis_password,
			decode_responses=True,
			socket_connect_timeout=5,
			socket_timeout=5
		)

	def create(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
		"""
		Create or update a key-value pair in Redis.

		Args:
			key: Redis key
			value: Value to store (will be JSON serialized)
			ttl: Optional time-to-live in seconds

		Returns:
			True if successful
		"""
		try:
			serialized = json.dumps(value, default=str)
			if ttl:
				return bool(self.client.setex(key, ttl, serialized))
			return bool(self.client.set(key, serialized))
		except Exception as e:
			raise ValueError(f"Failed to create key {key}: {str(e)}")

	def create_if_absent(self, key: str, value: Any) -> bool:
		"""
		Create a key only if it does not exist yet.

		Returns:
			True if the key was written, False if it already existed
		"""
		try:
			return bool(self.client.set(key, json.dumps(value, default=str), nx=True))
		except Exception as e:
			raise ValueError(f"Failed to create key {key}: {str(e)}")

	def read(self, key: str) -> Optional[Any]:
		"""
		Read a value from Redis by key.

		Args:
			key: Redis key

		Returns:
			Deserialized value or None if key doesn't exist
		"""
		try:
			value = self.client.get(key)
			if value is None:
				return None
			return json.loads(value)
		except json.JSONDecodeError:
			# If it's not JSON, return as string
			return value
		except Exception as e:
			raise ValueError(f"Failed to read key {key}: {str(e)}")

	def _normalize_to_dict(self, data: Any, key: str, entity_type: str) -> Optional[Dict]:
		"""
		Normalize Redis data to a dictionary, handling edge cases.

		Args:
			data: Raw data from Redis (could be None, str, or dict)
			key: Redis key (for logging)
			entity_type: Type of entity (for logging, e.g., "incident", "resource")

		Returns:
			Dictionary if successful, None otherwise
		"""
		if data is None:
			return None

		# Values stored via to_redis_json() come back as a JSON string inside a JSON string
		if isinstance(data, str):
			try:
				data = json.loads(data)
			except json.JSONDecodeError:
				logger.warning(f"Failed to parse {entity_type} JSON string from Redis key {key}")
				return None

		if not isinstance(data, dict):
			logger.warning(f"{entity_type.capitalize()} data from Redis key {key} is not a dictionary: {type(data)}")
			return None

		return data

	def read_as_dict(self, key: str, entity_type: str = "entity") -> Optional[Dict]:
		"""
		Read a value from Redis and normalize it to a dictionary.

		Args:
			key: Redis key
			entity_type: Type of entity (for logging)

		Returns:
			Dictionary if successful, None otherwise
		"""
		try:
			raw_data = self.read(key)
			return self._normalize_to_dict(raw_data, key, entity_type)
		except Exception as e:
			logger.warning(f"Failed to read {entity_type} from Redis key {key}: {str(e)}")
			return None

	def read_as_schema(self, key: str, schema_class: Type[T], entity_type: str = "entity") -> Optional[T]:
		"""
		Read a value from Redis and deserialize it to a schema object.
		Handles all edge cases: None values, string conversion, type checking, and errors.

		Args:
			key: Redis key
			schema_class: Schema class with from_dict method (e.g., Incident, RescueResource)
			entity_type: Type of entity (for logging)

		Returns:
			Schema object if successful, None otherwise
		"""
		try:
			normalized_data = self.read_as_dict(key, entity_type)
			if normalized_data is None:
				return None
			return schema_class.from_dict(normalized_data)
		except Exception as e:
			logger.warning(f"Failed to load {entity_type} from Redis key {key}: {str(e)}")
			return None

	def read_all_as_schema(self, keys: list[str], schema_class: Type[T], entity_type: str = "entity") -> list[T]:
		"""
		Read multiple values from Redis and deserialize them to schema objects.
		Continues processing even if some fail.

		Args:
			keys: List of Redis keys
			schema_class: Schema class with from_dict method
			entity_type: Type of entity (for logging)

		Returns:
			List of schema objects (only successful deserializations)
		"""
		results = []
		for key in keys:
			schema_obj = self.read_as_schema(key, schema_class, entity_type)
			if schema_obj is not None:
				results.append(schema_obj)
		return results

	def compare_and_set(self, key: str, expected: Callable[[Optional[Dict]], bool], new_value: Any) -> bool:
		"""
		Optimistic compare-and-swap of a JSON record.

		The key is WATCHed, its current value is handed to `expected`, and `new_value`
		is written in a MULTI/EXEC block only if the predicate accepts it. A concurrent
		write between WATCH and EXEC aborts the transaction.

		Args:
			key: Redis key
			expected: Predicate over the current decoded record (None when missing)
			new_value: Value to store (will be JSON serialized)

		Returns:
			True if the write happened, False on a mismatch or a lost race
		"""
		serialized = json.dumps(new_value, default=str)
		try:
			with self.client.pipeline() as pipe:
				pipe.watch(key)
				raw = pipe.get(key)
				current = self._normalize_to_dict(json.loads(raw), key, "record") if raw is not None else None
				if not expected(current):
					pipe.unwatch()
					return False
				pipe.multi()
				pipe.set(key, serialized)
				pipe.execute()
				return True
		except redis.WatchError:
			logger.info(f"Concurrent write detected on {key}, compare-and-set aborted")
			return False
		except json.JSONDecodeError as e:
			raise ValueError(f"Failed to decode key {key} during compare-and-set: {str(e)}")

	def get_all_keys(self, pattern: str = "*") -> list[str]:
		"""
		Get all keys matching a pattern.

		Args:
			pattern: Redis key pattern (default: "*" for all keys)

		Returns:
			List of matching keys
		"""
		try:
			return list(self.client.scan_iter(match=pattern))
		except Exception as e:
			raise ValueError(f"Failed to get keys with pattern {pattern}: {str(e)}")

	def ping(self) -> bool:
		"""
		Test Redis connection.

		Returns:
			True if connection is alive
		"""
		try:
			return self.client.ping()
		except Exception as e:
			raise ConnectionError(f"Redis connection failed: {str(e)}")

# Global instance
rescue_redis = RescueRedis()
