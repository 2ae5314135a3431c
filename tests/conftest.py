"""
Pytest configuration and fixtures.
"""
import fakeredis
import pytest
from contextlib import ExitStack
from unittest.mock import AsyncMock, patch
from rescue_triage.config import settings
from rescue_triage.redis_client import RescueRedis
from rescue_triage.schemas.classification import TeamType
from rescue_triage.schemas.coordinate import Coordinate
from rescue_triage.schemas.resource import RescueResource
from rescue_triage.state import State

# Modules that import the module-level state singleton
STATE_USERS = [
	"rescue_triage.services.incident_lifecycle.state",
	"rescue_triage.services.triage_coordinator.state",
	"rescue_triage.services.incident_crud_service.state",
	"rescue_triage.services.resource_crud_service.state",
	"rescue_triage.services.triage_sweep_service.state",
]


def make_resource(resource_id, team_type, latitude, longitude, is_active=True):
	return RescueResource(
		id=resource_id,
		name=f"Team {resource_id}",
		team_type=team_type,
		location=Coordinate(latitude=latitude, longitude=longitude),
		phone="112",
		is_active=is_active
	)


@pytest.fixture
def fake_redis():
	"""In-memory Redis with WATCH/MULTI support."""
	client = fakeredis.FakeRedis(decode_responses=True)
	yield client
	client.flushall()


@pytest.fixture
def store(fake_redis):
	"""State backed by fakeredis."""
	return State(redis_client=RescueRedis(client=fake_redis))


@pytest.fixture
def roster():
	"""
	Jammu roster: a Fire team co-located with the Jammu centre, another ~50 km north,
	a Medical and an NDRF team nearby, and an inactive Police team.
	"""
	return [
		make_resource("fire-1", TeamType.FIRE, 32.7266, 74.8570),
		make_resource("fire-2", TeamType.FIRE, 33.1763, 74.8570),
		make_resource("medical-1", TeamType.MEDICAL, 32.7400, 74.8600),
		make_resource("ndrf-1", TeamType.NDRF, 32.8000, 74.9000),
		make_resource("police-1", TeamType.POLICE, 32.7270, 74.8575, is_active=False),
	]


@pytest.fixture
def seeded_store(store, roster):
	for resource in roster:
		store.add_resource(resource)
	return store


@pytest.fixture
def patched_state(seeded_store):
	"""Point every service at the fakeredis-backed store, with no notification webhook."""
	with ExitStack() as stack:
		for target in STATE_USERS:
			stack.enter_context(patch(target, seeded_store))
		stack.enter_context(patch.object(settings, "notification_webhook_url", None))
		yield seeded_store


@pytest.fixture
def mock_emit():
	"""Replace notification emission with an AsyncMock that reports success."""
	with patch(
		"rescue_triage.services.triage_coordinator.NotificationService.emit",
		new_callable=AsyncMock,
		return_value=True
	) as emit:
		yield emit


@pytest.fixture
def resource_factory():
	"""Builder for roster entries: resource_factory(id, team_type, lat, lng, is_active=True)."""
	return make_resource
