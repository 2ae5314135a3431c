"""
Celery task for the periodic rematch sweep.
"""
import asyncio
import traceback
from rescue_triage.celery_app import celery_app
from rescue_triage.services.triage_sweep_service import TriageSweepService
import logging

logger = logging.getLogger(__name__)


@celery_app.task(name="rescue_triage.tasks.rematch_sweep_task", bind=True, max_retries=3)
def rematch_sweep_task(self):
	"""
	Celery task that rematches unserved and assigned incidents against the current roster.
	Runs every SWEEP_INTERVAL_MINUTES via CeleryBeat schedule.

	Returns:
		Dictionary with summary of the sweep
	"""
	logger.info("=" * 80)
	logger.info("REMATCH SWEEP TASK STARTED")
	logger.info("=" * 80)

	try:
		result = asyncio.run(TriageSweepService.sweep())
		logger.info("=" * 80)
		logger.info(f"REMATCH SWEEP TASK COMPLETED: {result}")
		logger.info("=" * 80)
		return result
	except Exception as e:
		logger.error("=" * 80)
		logger.error(f"Rematch sweep task FAILED: {str(e)}")
		logger.error(f"Exception type: {type(e).__name__}")
		logger.error(traceback.format_exc())
		logger.error("=" * 80)
		# Retry with exponential backoff
		raise self.retry(exc=e, countdown=60 * (2 ** self.request.retries))
