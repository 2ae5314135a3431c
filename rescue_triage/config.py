import os
from typing import Optional
from crewai import LLM
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Settings:
	# Redis configuration
	redis_host: str = os.getenv("REDIS_HOST", "localhost")
	redis_port: int = int(os.getenv("REDIS_PORT", "6379"))
	redis_db: int = int(os.getenv("REDIS_DB", "0"))
	redis_password: Optional[str] = os.getenv("REDIS_PASSWORD", None)

	# CrewAI / Gemini configuration (scene classification oracle)
	gemini_model: str = os.getenv("GEMINI_MODEL", "gemini/gemini-2.5-flash")
	gemini_api_key: str = os.getenv("GEMINI_API_KEY", "test")
	oracle_temperature: float = float(os.getenv("ORACLE_TEMPERATURE", "0.3"))

	# Oracle call budget. ORACLE_MAX_ATTEMPTS of 2 means one automatic retry.
	oracle_timeout_seconds: float = float(os.getenv("ORACLE_TIMEOUT_SECONDS", "45"))
	oracle_max_attempts: int = int(os.getenv("ORACLE_MAX_ATTEMPTS", "2"))
	oracle_max_workers: int = int(os.getenv("ORACLE_MAX_WORKERS", "4"))

	# Celery configuration
	executor_max_retries: int = int(os.getenv("EXECUTOR_MAX_RETRIES", "2"))
	sweep_interval_minutes: int = int(os.getenv("SWEEP_INTERVAL_MINUTES", "5"))

	# Number of nearest resources assigned per incident
	match_k: int = int(os.getenv("MATCH_K", "3"))

	# Notification sink. When no webhook is configured, dispatch records are logged only.
	notification_webhook_url: Optional[str] = os.getenv("NOTIFICATION_WEBHOOK_URL", None)
	notification_timeout_seconds: float = float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "10"))

	@property
	def default_llm(self) -> LLM:
		return LLM(
			model=self.gemini_model,
			api_key=self.gemini_api_key,
			temperature=self.oracle_temperature,
			timeout=self.oracle_timeout_seconds
		)

	@property
	def celery_broker_url(self) -> str:
		"""Celery broker URL - uses same Redis as application."""
		return self.redis_url

	@property
	def celery_result_backend(self) -> str:
		"""Celery result backend - uses same Redis as application."""
		return self.redis_url

	@property
	def redis_url(self) -> str:
		if self.redis_password:
			return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
		return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

settings = Settings()
