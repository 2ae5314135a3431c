"""
Executor for the Scene Classification Crew with retry logic.
"""
from typing import Optional
from rescue_triage.config import settings
from rescue_triage.crews.base_executor import BaseExecutor
from rescue_triage.crews.scene_classification_crew.crew import SceneClassificationCrew
import logging

logger = logging.getLogger(__name__)


class SceneClassificationExecutor(BaseExecutor):
	"""
	Executor for the Scene Classification Crew.
	Defaults to ORACLE_MAX_ATTEMPTS attempts, i.e. at most one automatic retry.
	"""

	def __init__(self, max_retries: Optional[int] = None):
		super().__init__(max_retries=max_retries or settings.oracle_max_attempts)
		self.crew = SceneClassificationCrew()

	def _execute(self, image_url: str) -> str:
		"""
		Execute the scene classification crew.

		Args:
			image_url: URL of the uploaded scene photograph

		Returns:
			Raw oracle text
		"""
		result = self.crew.kickoff(inputs={"image_url": image_url})
		raw_text = getattr(result, "raw", None)
		if not raw_text:
			raise ValueError("Scene classification crew returned no text")
		return raw_text
