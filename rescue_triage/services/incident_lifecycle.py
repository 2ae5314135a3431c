"""
Incident status state machine.

Pending -> Assigned -> Dispatched -> Resolved, plus Assigned -> Assigned for
re-assignment. Every transition is written through the store's compare-and-swap
on (status, version); a lost race is re-read and re-validated exactly once.
"""
from typing import Any, Dict, FrozenSet, List, Optional
from rescue_triage.exceptions import NotFoundError, ValidationError
from rescue_triage.exceptions.triage import InvalidTransitionError, TriageError, TriageErrorKind
from rescue_triage.schemas.incident import Incident, IncidentStatus, MatchPhase, TriageFlag
from rescue_triage.state import state
import logging

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: Dict[IncidentStatus, FrozenSet[IncidentStatus]] = {
	IncidentStatus.PENDING: frozenset({IncidentStatus.ASSIGNED}),
	IncidentStatus.ASSIGNED: frozenset({IncidentStatus.ASSIGNED, IncidentStatus.DISPATCHED}),
	IncidentStatus.DISPATCHED: frozenset({IncidentStatus.RESOLVED}),
	IncidentStatus.RESOLVED: frozenset(),
}


class IncidentLifecycle:
	"""Applies status transitions to persisted incidents."""

	@staticmethod
	def can_transition(current: IncidentStatus, new_status: IncidentStatus) -> bool:
		return new_status in ALLOWED_TRANSITIONS[current]

	@staticmethod
	def validate_transition(
		incident: Incident,
		new_status: IncidentStatus,
		assigned_resources: Optional[List[str]] = None
	):
		"""
		Check a transition against the machine and the incident's data.

		Raises:
			InvalidTransitionError: If new_status is not reachable from the current status
			TriageError: INSUFFICIENT_DATA if assigning an incident without a location
			ValidationError: If an assignment is empty, or resources change outside Assigned
		"""
		if not IncidentLifecycle.can_transition(incident.status, new_status):
			raise InvalidTransitionError(incident.id, incident.status.value, new_status.value)

		if new_status == IncidentStatus.ASSIGNED:
			if incident.location is None:
				raise TriageError(
					TriageErrorKind.INSUFFICIENT_DATA,
					"Cannot assign resources to an incident without a location",
					incident_id=incident.id,
					phase="assignment"
				)
			if not assigned_resources:
				raise ValidationError(f"Assignment for incident '{incident.id}' needs at least one resource")
		elif assigned_resources is not None:
			raise ValidationError(f"Assigned resources of incident '{incident.id}' can only change while Assigned")

	@staticmethod
	def assign(
		incident_id: str,
		resource_ids: List[str],
		match_phase: Optional[MatchPhase] = None,
		expected_version: Optional[int] = None
	) -> Incident:
		"""
		Pending -> Assigned.

		Args:
			incident_id: Incident to assign
			resource_ids: Ranked resource ids, nearest first
			match_phase: Phase that produced the ranking
			expected_version: Version of the snapshot the ranking was computed from. If
				the stored incident has moved past it, PERSISTENCE_CONFLICT is raised
				instead of writing a stale ranking.
		"""
		return IncidentLifecycle._transition(
			incident_id,
			IncidentStatus.ASSIGNED,
			expected_source=IncidentStatus.PENDING,
			assigned_resources=list(resource_ids),
			expected_version=expected_version,
			match_phase=match_phase,
			triage_flag=None
		)

	@staticmethod
	def reassign(
		incident_id: str,
		resource_ids: List[str],
		match_phase: Optional[MatchPhase] = None,
		expected_version: Optional[int] = None
	) -> Incident:
		"""Assigned -> Assigned, fully replacing assigned_resources."""
		return IncidentLifecycle._transition(
			incident_id,
			IncidentStatus.ASSIGNED,
			expected_source=IncidentStatus.ASSIGNED,
			assigned_resources=list(resource_ids),
			expected_version=expected_version,
			match_phase=match_phase
		)

	@staticmethod
	def confirm_dispatch(incident_id: str) -> Incident:
		"""Assigned -> Dispatched, once a resource acknowledged or departed."""
		return IncidentLifecycle._transition(incident_id, IncidentStatus.DISPATCHED)

	@staticmethod
	def resolve(incident_id: str) -> Incident:
		"""Dispatched -> Resolved."""
		return IncidentLifecycle._transition(incident_id, IncidentStatus.RESOLVED)

	@staticmethod
	def update_pending(incident_id: str, expected_flag: Optional[TriageFlag] = None, **changes: Any) -> Incident:
		"""
		Replace fields of a Pending incident (triage flag, match phase, classification)
		without changing its status. Goes through the same compare-and-swap path.

		Args:
			incident_id: Incident to update
			expected_flag: If given, the triage flag the caller observed. It is checked
				on every fresh read, so an incident whose flag was changed by another
				writer is never overwritten.
			**changes: Fields to replace

		Raises:
			InvalidTransitionError: If the incident is not Pending
			TriageError: PERSISTENCE_CONFLICT if the flag no longer matches, or the
				compare-and-swap is lost twice
		"""
		for attempt in (1, 2):
			incident = IncidentLifecycle._load(incident_id)
			if incident.status != IncidentStatus.PENDING:
				if attempt == 1:
					raise InvalidTransitionError(incident_id, incident.status.value, IncidentStatus.PENDING.value)
				IncidentLifecycle._raise_conflict(incident_id, f"incident moved to {incident.status.value} concurrently")
			if expected_flag is not None and incident.triage_flag != expected_flag:
				current_flag = incident.triage_flag.value if incident.triage_flag else "none"
				IncidentLifecycle._raise_conflict(
					incident_id,
					f"triage flag is {current_flag}, expected {expected_flag.value}"
				)
			if state.update_incident_status(
				incident_id,
				expected_status=IncidentStatus.PENDING,
				new_status=IncidentStatus.PENDING,
				expected_version=incident.version,
				**changes
			):
				return IncidentLifecycle._load(incident_id)
			logger.warning(f"Compare-and-swap lost on Pending update of incident {incident_id} (attempt {attempt})")
		IncidentLifecycle._raise_conflict(incident_id, "lost the compare-and-swap twice")

	@staticmethod
	def mark_flag(incident_id: str, flag: Optional[TriageFlag], expected_flag: Optional[TriageFlag] = None) -> Incident:
		return IncidentLifecycle.update_pending(incident_id, expected_flag=expected_flag, triage_flag=flag)

	@staticmethod
	def _transition(
		incident_id: str,
		new_status: IncidentStatus,
		expected_source: Optional[IncidentStatus] = None,
		assigned_resources: Optional[List[str]] = None,
		expected_version: Optional[int] = None,
		**changes: Any
	) -> Incident:
		"""
		Apply one transition with a single re-read on conflict.

		On the first attempt an invalid transition is the caller's error
		(InvalidTransitionError). After a lost compare-and-swap the incident is re-read;
		if the transition is no longer valid, a concurrent writer got there first and
		PERSISTENCE_CONFLICT is raised instead. With expected_version set, any change
		to the incident since that version is a conflict as well.
		"""
		for attempt in (1, 2):
			incident = IncidentLifecycle._load(incident_id)

			if attempt == 1:
				if expected_source is not None and incident.status != expected_source:
					raise InvalidTransitionError(incident_id, incident.status.value, new_status.value)
			else:
				still_valid = (
					(expected_source is None or incident.status == expected_source)
					and IncidentLifecycle.can_transition(incident.status, new_status)
				)
				if not still_valid:
					IncidentLifecycle._raise_conflict(
						incident_id,
						f"incident moved to {incident.status.value} while applying {new_status.value}"
					)
			if expected_version is not None and incident.version != expected_version:
				IncidentLifecycle._raise_conflict(
					incident_id,
					f"incident is at version {incident.version}, {new_status.value} was computed from version {expected_version}"
				)
			IncidentLifecycle.validate_transition(incident, new_status, assigned_resources)

			if state.update_incident_status(
				incident_id,
				expected_status=incident.status,
				new_status=new_status,
				assigned_resources=assigned_resources,
				expected_version=incident.version,
				**changes
			):
				logger.info(
					f"Incident {incident_id}: {incident.status.value} -> {new_status.value}",
					extra={"extra_fields": {"incident_id": incident_id, "status": new_status.value}}
				)
				return IncidentLifecycle._load(incident_id)

			logger.warning(
				f"Compare-and-swap lost for incident {incident_id} ({incident.status.value} -> {new_status.value}, attempt {attempt})"
			)

		IncidentLifecycle._raise_conflict(incident_id, f"lost the compare-and-swap twice applying {new_status.value}")

	@staticmethod
	def _load(incident_id: str) -> Incident:
		incident = state.get_incident(incident_id)
		if incident is None:
			raise NotFoundError("Incident", incident_id)
		return incident

	@staticmethod
	def _raise_conflict(incident_id: str, reason: str):
		raise TriageError(
			TriageErrorKind.PERSISTENCE_CONFLICT,
			f"Concurrent update of incident {incident_id}: {reason}",
			incident_id=incident_id,
			phase="lifecycle"
		)
