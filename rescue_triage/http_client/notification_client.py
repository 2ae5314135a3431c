from typing import Any, Dict, Optional
import httpx
from rescue_triage.http_client.base_client import BaseHTTPClient
from rescue_triage.config import settings
from rescue_triage.schemas.dispatch import DispatchRecord

class NotificationSinkClient(BaseHTTPClient):
	"""
	Webhook client for the notification sink.
	Makes exactly one delivery attempt; retry policy belongs to the sink.
	"""

	def __init__(self, webhook_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
		url = webhook_url or settings.notification_webhook_url
		if not url:
			raise ValueError("No notification webhook URL configured")
		self.webhook_url = url
		super().__init__(
			url,
			default_headers={"Content-Type": "application/json"},
			timeout=settings.notification_timeout_seconds,
			max_retries=1,
			transport=transport
		)

	async def send_dispatch(self, record: DispatchRecord) -> Dict[str, Any]:
		"""
		Deliver a dispatch record.

		Args:
			record: Dispatch record to deliver

		Returns:
			Sink response body
		"""
		# Absolute URL, so httpx does not merge it with base_url
		return await self.post(self.webhook_url, json=record.to_dict())
