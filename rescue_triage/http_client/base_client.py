from typing import Optional, Dict, Any
import httpx
from abc import ABC

class BaseHTTPClient(ABC):
	"""
	Base HTTP client class for outbound API interactions.
	Can be extended for different API clients.
	"""

	def __init__(
		self,
		base_url: str,
		default_headers: Optional[Dict[str, str]] = None,
		timeout: float = 30.0,
		max_retries: int = 3,
		transport: Optional[httpx.AsyncBaseTransport] = None
	):
		self.base_url = base_url.rstrip('/')
		self.default_headers = default_headers or {}
		self.timeout = timeout
		self.max_retries = max(1, max_retries)
		self.client = httpx.AsyncClient(
			base_url=self.base_url,
			headers=self.default_headers,
			timeout=self.timeout,
			transport=transport
		)

	async def post(
		self,
		endpoint: str,
		data: Optional[Dict[str, Any]] = None,
		json: Optional[Dict[str, Any]] = None,
		headers: Optional[Dict[str, str]] = None
	) -> Dict[str, Any]:
		"""
		Perform a POST request.

		Args:
			endpoint: API endpoint (relative to base_url)
			data: Form data
			json: JSON body
			headers: Additional headers (merged with default_headers)

		Returns:
			Response JSON as dictionary, or {} for an empty body
		"""
		merged_headers = {**self.default_headers, **(headers or {})}

		for attempt in range(self.max_retries):
			try:
				response = await self.client.post(
					endpoint,
					data=data,
					json=json,
					headers=merged_headers
				)
				response.raise_for_status()
				return response.json() if response.content else {}
			except httpx.HTTPError:
				if attempt == self.max_retries - 1:
					raise

	async def close(self):
		"""Close the HTTP client."""
		await self.client.aclose()

	async def __aenter__(self):
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb):
		await self.close()
