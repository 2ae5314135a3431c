from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from rescue_triage.controllers import incident_controller, resource_controller
from rescue_triage.logging_config import setup_logging
import os

# Setup structured JSON logging to stdout
log_level = os.getenv("LOG_LEVEL", "INFO")
setup_logging(level=log_level)

app = FastAPI(
	title="Rescue Triage API",
	description="API for triaging disaster photo reports and SOS signals and dispatching rescue teams",
	version="1.0.0"
)

# The reporter and operator frontends are served from other origins
app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=False,
	allow_methods=["*"],
	allow_headers=["*"],
)

# Include routers
app.include_router(incident_controller.router)
app.include_router(resource_controller.router)

@app.get("/")
async def root():
	return {
		"message": "Welcome to Rescue Triage API!",
		"endpoints": {
			"incidents": "/incidents",
			"resources": "/resources"
		}
	}

@app.get("/health")
async def health():
	"""Health check endpoint."""
	from rescue_triage.redis_client import rescue_redis
	try:
		redis_healthy = rescue_redis.ping()
		return {
			"status": "healthy",
			"redis": "connected" if redis_healthy else "disconnected"
		}
	except Exception as e:
		return {
			"status": "unhealthy",
			"redis": "error",
			"error": str(e)
		}
