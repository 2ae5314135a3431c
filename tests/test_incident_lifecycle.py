"""
Unit tests for IncidentLifecycle.
"""
import threading
import pytest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch
from rescue_triage.exceptions import InvalidTransitionError, NotFoundError, TriageError, TriageErrorKind, ValidationError
from rescue_triage.schemas.classification import Classification, DisasterType, Severity
from rescue_triage.schemas.coordinate import Coordinate
from rescue_triage.schemas.incident import Incident, IncidentOrigin, IncidentStatus, MatchPhase, TriageFlag
from rescue_triage.services.incident_lifecycle import IncidentLifecycle

JAMMU = Coordinate(latitude=32.7266, longitude=74.8570)


def create_sos(store) -> Incident:
	incident = Incident(origin=IncidentOrigin.SOS_SIGNAL, location=JAMMU)
	store.create_incident(incident)
	return incident


def create_dispatched(store) -> Incident:
	incident = create_sos(store)
	IncidentLifecycle.assign(incident.id, ["fire-1"], match_phase=MatchPhase.UNRESTRICTED)
	return IncidentLifecycle.confirm_dispatch(incident.id)


class TestForwardTransitions:
	"""Test cases for the happy path Pending -> Assigned -> Dispatched -> Resolved."""

	def test_full_lifecycle(self, patched_state):
		incident = create_sos(patched_state)

		assigned = IncidentLifecycle.assign(incident.id, ["fire-1", "medical-1"], match_phase=MatchPhase.UNRESTRICTED)
		assert assigned.status == IncidentStatus.ASSIGNED
		assert assigned.assigned_resources == ["fire-1", "medical-1"]
		assert assigned.match_phase == MatchPhase.UNRESTRICTED
		assert assigned.version == 1

		dispatched = IncidentLifecycle.confirm_dispatch(incident.id)
		assert dispatched.status == IncidentStatus.DISPATCHED
		assert dispatched.assigned_resources == ["fire-1", "medical-1"]

		resolved = IncidentLifecycle.resolve(incident.id)
		assert resolved.status == IncidentStatus.RESOLVED
		assert resolved.version == 3

	def test_assign_clears_triage_flag(self, patched_state):
		incident = Incident(origin=IncidentOrigin.SOS_SIGNAL, location=JAMMU, triage_flag=TriageFlag.NO_ELIGIBLE_RESOURCE)
		patched_state.create_incident(incident)
		assert IncidentLifecycle.assign(incident.id, ["fire-1"]).triage_flag is None

	def test_reassign_replaces_resources(self, patched_state):
		incident = create_sos(patched_state)
		IncidentLifecycle.assign(incident.id, ["fire-1", "medical-1"])
		reassigned = IncidentLifecycle.reassign(incident.id, ["ndrf-1"], match_phase=MatchPhase.TYPE_RESTRICTED)
		assert reassigned.status == IncidentStatus.ASSIGNED
		assert reassigned.assigned_resources == ["ndrf-1"]
		assert reassigned.version == 2

	def test_mark_flag(self, patched_state):
		incident = create_sos(patched_state)
		flagged = IncidentLifecycle.mark_flag(incident.id, TriageFlag.NO_ELIGIBLE_RESOURCE)
		assert flagged.status == IncidentStatus.PENDING
		assert flagged.triage_flag == TriageFlag.NO_ELIGIBLE_RESOURCE
		assert flagged.version == 1


class TestRejectedTransitions:
	"""Test cases for illegal moves, which must leave the stored incident unchanged."""

	def test_dispatched_cannot_go_back_to_assigned(self, patched_state):
		incident = create_dispatched(patched_state)
		with pytest.raises(InvalidTransitionError):
			IncidentLifecycle.reassign(incident.id, ["fire-2"])
		stored = patched_state.get_incident(incident.id)
		assert stored.status == IncidentStatus.DISPATCHED
		assert stored.assigned_resources == ["fire-1"]
		assert stored.version == incident.version

	def test_resolved_is_terminal(self, patched_state):
		incident = create_dispatched(patched_state)
		IncidentLifecycle.resolve(incident.id)
		for move in (IncidentLifecycle.confirm_dispatch, IncidentLifecycle.resolve):
			with pytest.raises(InvalidTransitionError):
				move(incident.id)
		assert patched_state.get_incident(incident.id).status == IncidentStatus.RESOLVED

	def test_pending_cannot_skip_to_dispatched(self, patched_state):
		incident = create_sos(patched_state)
		with pytest.raises(InvalidTransitionError):
			IncidentLifecycle.confirm_dispatch(incident.id)

	def test_assign_twice_is_rejected(self, patched_state):
		incident = create_sos(patched_state)
		IncidentLifecycle.assign(incident.id, ["fire-1"])
		with pytest.raises(InvalidTransitionError):
			IncidentLifecycle.assign(incident.id, ["fire-2"])

	def test_assign_without_location(self, patched_state):
		classification = Classification(description="Smoke", disaster_type=DisasterType.FIRE, severity=Severity.LOW)
		incident = Incident(origin=IncidentOrigin.PHOTO_REPORT, classification=classification)
		patched_state.create_incident(incident)
		with pytest.raises(TriageError) as exc_info:
			IncidentLifecycle.assign(incident.id, ["fire-1"])
		assert exc_info.value.kind == TriageErrorKind.INSUFFICIENT_DATA
		assert exc_info.value.incident_id == incident.id

	def test_assign_empty_list(self, patched_state):
		incident = create_sos(patched_state)
		with pytest.raises(ValidationError):
			IncidentLifecycle.assign(incident.id, [])

	def test_mark_flag_outside_pending(self, patched_state):
		incident = create_dispatched(patched_state)
		with pytest.raises(InvalidTransitionError):
			IncidentLifecycle.mark_flag(incident.id, TriageFlag.NO_ELIGIBLE_RESOURCE)

	def test_unknown_incident(self, patched_state):
		with pytest.raises(NotFoundError):
			IncidentLifecycle.resolve("does-not-exist")


class TestCompareAndSwapRetry:
	"""Test cases for the single re-read after a lost compare-and-swap."""

	def test_retry_once_after_lost_race(self, patched_state):
		incident = create_dispatched(patched_state)
		real_update = patched_state.update_incident_status
		calls = []

		def flaky_update(*args, **kwargs):
			calls.append(args)
			if len(calls) == 1:
				return False
			return real_update(*args, **kwargs)

		with patch.object(patched_state, "update_incident_status", side_effect=flaky_update):
			resolved = IncidentLifecycle.resolve(incident.id)

		assert resolved.status == IncidentStatus.RESOLVED
		assert len(calls) == 2

	def test_second_loss_is_surfaced(self, patched_state):
		incident = create_dispatched(patched_state)
		with patch.object(patched_state, "update_incident_status", return_value=False) as update:
			with pytest.raises(TriageError) as exc_info:
				IncidentLifecycle.resolve(incident.id)
		assert exc_info.value.kind == TriageErrorKind.PERSISTENCE_CONFLICT
		assert exc_info.value.incident_id == incident.id
		assert update.call_count == 2
		assert patched_state.get_incident(incident.id).status == IncidentStatus.DISPATCHED

	def test_assignment_conflicts_when_data_changed_during_race(self, patched_state):
		"""Test a lost race where a concurrent writer changed the classification, not the status."""
		fire = Classification(description="Smoke", disaster_type=DisasterType.FIRE, severity=Severity.HIGH)
		flood = Classification(description="Water", disaster_type=DisasterType.FLOOD, severity=Severity.HIGH)
		incident = Incident(origin=IncidentOrigin.PHOTO_REPORT, location=JAMMU, classification=fire)
		patched_state.create_incident(incident)
		real_update = patched_state.update_incident_status
		calls = []

		def concurrent_reclassification(*args, **kwargs):
			calls.append(kwargs)
			if len(calls) == 1:
				real_update(
					incident.id,
					expected_status=IncidentStatus.PENDING,
					new_status=IncidentStatus.PENDING,
					expected_version=0,
					classification=flood
				)
				return False
			return real_update(*args, **kwargs)

		with patch.object(patched_state, "update_incident_status", side_effect=concurrent_reclassification):
			with pytest.raises(TriageError) as exc_info:
				IncidentLifecycle.assign(incident.id, ["fire-1"], expected_version=incident.version)

		assert exc_info.value.kind == TriageErrorKind.PERSISTENCE_CONFLICT
		assert len(calls) == 1
		stored = patched_state.get_incident(incident.id)
		assert stored.status == IncidentStatus.PENDING
		assert stored.classification.disaster_type == DisasterType.FLOOD
		assert stored.assigned_resources == []
		assert stored.version == 1

	def test_pending_update_rechecks_flag_after_lost_race(self, patched_state):
		fire = Classification(description="Smoke", disaster_type=DisasterType.FIRE, severity=Severity.HIGH)
		flood = Classification(description="Water", disaster_type=DisasterType.FLOOD, severity=Severity.HIGH)
		incident = Incident(origin=IncidentOrigin.PHOTO_REPORT, location=JAMMU, triage_flag=TriageFlag.CLASSIFICATION_FAILED)
		patched_state.create_incident(incident)
		real_update = patched_state.update_incident_status
		calls = []

		def concurrent_reclassification(*args, **kwargs):
			calls.append(kwargs)
			real_update(
				incident.id,
				expected_status=IncidentStatus.PENDING,
				new_status=IncidentStatus.PENDING,
				expected_version=0,
				classification=fire,
				triage_flag=None
			)
			return False

		with patch.object(patched_state, "update_incident_status", side_effect=concurrent_reclassification):
			with pytest.raises(TriageError) as exc_info:
				IncidentLifecycle.update_pending(
					incident.id,
					expected_flag=TriageFlag.CLASSIFICATION_FAILED,
					classification=flood,
					triage_flag=None
				)

		assert exc_info.value.kind == TriageErrorKind.PERSISTENCE_CONFLICT
		assert len(calls) == 1
		stored = patched_state.get_incident(incident.id)
		assert stored.classification.disaster_type == DisasterType.FIRE
		assert stored.version == 1

	def test_assign_from_outdated_version(self, patched_state):
		incident = create_sos(patched_state)
		IncidentLifecycle.mark_flag(incident.id, TriageFlag.NO_ELIGIBLE_RESOURCE)

		with pytest.raises(TriageError) as exc_info:
			IncidentLifecycle.assign(incident.id, ["fire-1"], expected_version=incident.version)

		assert exc_info.value.kind == TriageErrorKind.PERSISTENCE_CONFLICT
		stored = patched_state.get_incident(incident.id)
		assert stored.status == IncidentStatus.PENDING
		assert stored.triage_flag == TriageFlag.NO_ELIGIBLE_RESOURCE


class TestConcurrentResolve:
	"""Two simultaneous resolves of the same incident."""

	def test_exactly_one_wins(self, patched_state):
		incident = create_dispatched(patched_state)
		barrier = threading.Barrier(2)
		lock = threading.Lock()
		reads = {"count": 0}
		real_get = patched_state.get_incident

		def synchronized_get(incident_id):
			with lock:
				reads["count"] += 1
				hold = reads["count"] <= 2
			current = real_get(incident_id)
			if hold:
				# Both callers observe Dispatched before either writes
				barrier.wait(timeout=5)
			return current

		def attempt():
			try:
				return IncidentLifecycle.resolve(incident.id)
			except TriageError as e:
				return e

		with patch.object(patched_state, "get_incident", side_effect=synchronized_get):
			with ThreadPoolExecutor(max_workers=2) as pool:
				results = list(pool.map(lambda _: attempt(), range(2)))

		successes = [result for result in results if isinstance(result, Incident)]
		conflicts = [result for result in results if isinstance(result, TriageError)]
		assert len(successes) == 1
		assert len(conflicts) == 1
		assert conflicts[0].kind == TriageErrorKind.PERSISTENCE_CONFLICT

		stored = patched_state.get_incident(incident.id)
		assert stored.status == IncidentStatus.RESOLVED
		assert stored.version == incident.version + 1
