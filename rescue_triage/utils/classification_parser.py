import json
import re
from typing import Any, Dict, Iterator, List, Optional
from pydantic import ValidationError as PydanticValidationError
from rescue_triage.exceptions.triage import ParseError, ParseErrorKind
from rescue_triage.schemas.classification import Classification, DisasterType, Severity
import logging

logger = logging.getLogger(__name__)

# Fenced block: ```json ... ``` or bare ``` ... ```
FENCED_BLOCK_PATTERN = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\r?\n?(.*?)```", re.DOTALL)

# Phrasings the oracle prompt itself uses for enum members.
DISASTER_TYPE_ALIASES: Dict[str, DisasterType] = {
	"building collapse": DisasterType.COLLAPSE,
	"structural collapse": DisasterType.COLLAPSE,
	"medical emergency": DisasterType.MEDICAL,
}


class ClassificationParser:
	"""Turns untrusted oracle output into a validated Classification."""

	@staticmethod
	def parse(raw_text: Optional[str]) -> Classification:
		"""
		Parse the oracle's raw text into a Classification.

		Fallback chain, first decodable *and* schema-valid candidate wins:
		1. The whole trimmed text as one JSON object
		2. The body of each fenced code block
		3. Each balanced curly-brace span, in order of appearance

		Args:
			raw_text: Raw oracle output

		Returns:
			Validated Classification (recommended_team_types left empty for the caller's policy)

		Raises:
			ParseError: UNPARSEABLE if no candidate decodes to an object,
				SCHEMA_INVALID if candidates decode but none passes validation
		"""
		if not raw_text or not raw_text.strip():
			raise ParseError(ParseErrorKind.UNPARSEABLE, "Oracle returned empty text")

		first_schema_error: Optional[str] = None
		decoded_any = False

		for stage, candidate in ClassificationParser._candidates(raw_text):
			data = ClassificationParser._decode_object(candidate)
			if data is None:
				continue
			decoded_any = True
			try:
				classification = ClassificationParser.validate(data)
				logger.debug(f"Classification parsed at stage '{stage}'")
				return classification
			except ParseError as e:
				logger.info(f"Candidate from stage '{stage}' rejected: {e.message}")
				if first_schema_error is None:
					first_schema_error = e.message

		if decoded_any:
			raise ParseError(ParseErrorKind.SCHEMA_INVALID, first_schema_error or "No schema-valid object found")
		raise ParseError(ParseErrorKind.UNPARSEABLE, "No JSON object found in oracle output")

	@staticmethod
	def validate(data: Dict[str, Any]) -> Classification:
		"""
		Validate a decoded object against the classification schema.

		Args:
			data: Decoded JSON object from the oracle

		Returns:
			Classification

		Raises:
			ParseError: SCHEMA_INVALID on any missing field or non-enumerated value
		"""
		description = data.get("description")
		if not isinstance(description, str) or not description.strip():
			raise ParseError(ParseErrorKind.SCHEMA_INVALID, "description must be a non-empty string")

		disaster_type = ClassificationParser._coerce_disaster_type(data.get("disasterType"))
		severity = ClassificationParser._coerce_severity(data.get("severity"))

		reasoning = data.get("reasoning", "")
		if reasoning is None:
			reasoning = ""
		if not isinstance(reasoning, str):
			raise ParseError(ParseErrorKind.SCHEMA_INVALID, "reasoning must be a string")

		try:
			return Classification(
				description=description.strip(),
				disaster_type=disaster_type,
				severity=severity,
				reasoning=reasoning.strip(),
				suggested_teams=ClassificationParser._suggested_teams(data)
			)
		except PydanticValidationError as e:
			raise ParseError(ParseErrorKind.SCHEMA_INVALID, str(e))

	@staticmethod
	def _candidates(raw_text: str) -> Iterator[tuple[str, str]]:
		text = raw_text.strip()
		yield "whole_text", text
		for match in FENCED_BLOCK_PATTERN.finditer(text):
			yield "fenced_block", match.group(1).strip()
		for span in ClassificationParser.balanced_brace_spans(text):
			yield "brace_span", span

	@staticmethod
	def _decode_object(candidate: str) -> Optional[Dict[str, Any]]:
		if not candidate:
			return None
		try:
			data = json.loads(candidate)
		except (json.JSONDecodeError, ValueError):
			return None
		return data if isinstance(data, dict) else None

	@staticmethod
	def balanced_brace_spans(text: str) -> List[str]:
		"""
		Find top-level balanced {...} spans in text, ignoring braces inside JSON strings.

		Args:
			text: Text to scan

		Returns:
			Spans in order of appearance; an unterminated trailing span is dropped
		"""
		spans = []
		depth = 0
		start = -1
		in_string = False
		escaped = False

		for index, char in enumerate(text):
			if depth > 0 and in_string:
				if escaped:
					escaped = False
				elif char == "\\":
					escaped = True
				elif char == '"':
					in_string = False
				continue

			if char == "{":
				if depth == 0:
					start = index
				depth += 1
			elif char == "}" and depth > 0:
				depth -= 1
				if depth == 0:
					spans.append(text[start:index + 1])
			elif char == '"' and depth > 0:
				in_string = True

		return spans

	@staticmethod
	def _coerce_disaster_type(value: Any) -> DisasterType:
		if not isinstance(value, str):
			raise ParseError(ParseErrorKind.SCHEMA_INVALID, f"disasterType must be a string, got {type(value).__name__}")
		normalized = value.strip().lower()
		if normalized in DISASTER_TYPE_ALIASES:
			return DISASTER_TYPE_ALIASES[normalized]
		try:
			return DisasterType(normalized)
		except ValueError:
			raise ParseError(ParseErrorKind.SCHEMA_INVALID, f"disasterType '{value}' is not one of {[t.value for t in DisasterType]}")

	@staticmethod
	def _coerce_severity(value: Any) -> Severity:
		if not isinstance(value, str):
			raise ParseError(ParseErrorKind.SCHEMA_INVALID, f"severity must be a string, got {type(value).__name__}")
		try:
			return Severity(value.strip().lower())
		except ValueError:
			raise ParseError(ParseErrorKind.SCHEMA_INVALID, f"severity '{value}' is not one of {[s.value for s in Severity]}")

	@staticmethod
	def _suggested_teams(data: Dict[str, Any]) -> List[str]:
		teams = data.get("assignedTeams")
		if isinstance(teams, list):
			return [team.strip() for team in teams if isinstance(team, str) and team.strip()]
		team = data.get("assignedTeam")
		if isinstance(team, str) and team.strip():
			return [team.strip()]
		return []
