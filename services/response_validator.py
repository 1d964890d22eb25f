"""
Validation of completion output against the Epic/Stories shape.

The completion service is not trusted to follow the requested format, so the
text it returns goes through two gates before anything else sees it: it must
parse as JSON, and the parsed document must satisfy every rule below. Rules
are evaluated in order and all violations are collected, so a single bad
answer reports everything that is wrong with it.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import ValidationError

from errors import MalformedOutput, SchemaViolation
from models import AgileResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rule:
    name: str
    reason: str
    check: Callable[[Any], bool]


@dataclass(frozen=True)
class Violation:
    rule: str
    reason: str
    story_index: Optional[int] = None

    def to_dict(self) -> dict:
        data = {"rule": self.rule, "reason": self.reason}
        if self.story_index is not None:
            data["storyIndex"] = self.story_index
        return data


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _object(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _optional_list(value: Any) -> bool:
    return value is None or isinstance(value, list)


def _optional_string_items(value: Any) -> bool:
    # a non-list value is reported by the *_is_list rule
    if not isinstance(value, list):
        return True
    return all(isinstance(item, str) for item in value)


DOCUMENT_RULES: list[Rule] = [
    Rule("epic_is_object", "epic must be an object", lambda doc: isinstance(doc.get("epic"), dict)),
    Rule(
        "epic_summary_present",
        "epic.summary must be a non-empty string",
        lambda doc: _non_empty_string(_object(doc.get("epic")).get("summary")),
    ),
    Rule(
        "epic_description_present",
        "epic.description must be a non-empty string",
        lambda doc: _non_empty_string(_object(doc.get("epic")).get("description")),
    ),
    Rule("stories_is_list", "stories must be a list", lambda doc: isinstance(doc.get("stories"), list)),
]

STORY_RULES: list[Rule] = [
    Rule("story_is_object", "story must be an object", lambda story: isinstance(story, dict)),
    Rule(
        "story_summary_present",
        "story.summary must be a non-empty string",
        lambda story: _non_empty_string(_object(story).get("summary")),
    ),
    Rule(
        "story_description_present",
        "story.description must be a non-empty string",
        lambda story: _non_empty_string(_object(story).get("description")),
    ),
    Rule(
        "acceptance_criteria_is_list",
        "story.acceptanceCriteria must be a list when present",
        lambda story: _optional_list(_object(story).get("acceptanceCriteria")),
    ),
    Rule(
        "tasks_is_list",
        "story.tasks must be a list when present",
        lambda story: _optional_list(_object(story).get("tasks")),
    ),
    Rule(
        "acceptance_criteria_items_are_strings",
        "story.acceptanceCriteria must only contain strings",
        lambda story: _optional_string_items(_object(story).get("acceptanceCriteria")),
    ),
    Rule(
        "tasks_items_are_strings",
        "story.tasks must only contain strings",
        lambda story: _optional_string_items(_object(story).get("tasks")),
    ),
]


def validate_agile_document(document: Any) -> list[Violation]:
    """Return every rule the parsed document breaks; an empty list means valid."""
    if not isinstance(document, dict):
        return [Violation("document_is_object", "response must be a JSON object")]

    violations = [Violation(rule.name, rule.reason) for rule in DOCUMENT_RULES if not rule.check(document)]

    stories = document.get("stories")
    if isinstance(stories, list):
        for index, story in enumerate(stories):
            violations.extend(
                Violation(rule.name, rule.reason, story_index=index)
                for rule in STORY_RULES
                if not rule.check(story)
            )
    return violations


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    stripped = stripped[3:]
    if stripped.startswith("json"):
        stripped = stripped[4:]
    if stripped.endswith("```"):
        stripped = stripped[:-3]
    return stripped.strip()


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_agile_response(raw_text: str) -> AgileResponse:
    """
    Parse and validate completion text.

    Raises:
        MalformedOutput: the text is not JSON
        SchemaViolation: the JSON does not describe an epic with stories
    """
    if not isinstance(raw_text, str):
        logger.error(f"Completion text is not a string: {raw_text!r}")
        raise MalformedOutput(raw_text)

    try:
        # NaN and Infinity are accepted by json.loads but are not JSON
        document = json.loads(_strip_code_fence(raw_text), parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        logger.error(f"Failed to parse GPT response: {raw_text}")
        raise MalformedOutput(raw_text)

    violations = validate_agile_document(document)
    if violations:
        logger.error(f"Invalid GPT response format: {document}")
        logger.error(f"Violations: {[v.rule for v in violations]}")
        raise SchemaViolation(document, violations)

    try:
        return AgileResponse.model_validate(document)
    except ValidationError as exc:
        logger.error(f"Invalid GPT response format: {document}")
        raise SchemaViolation(document, [Violation("model", str(exc))]) from exc
