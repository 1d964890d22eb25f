from typing import Any, Optional


class RelayError(Exception):
    """Base exception for failures surfaced to the HTTP caller."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.details}


class MissingField(RelayError):
    status_code = 400

    def __init__(self, violations: list[dict[str, Any]]):
        super().__init__("Missing required fields", {"violations": violations})
        self.violations = violations


class MalformedOutput(RelayError):
    """The completion text could not be parsed as JSON."""

    def __init__(self, raw: str):
        super().__init__(f"Failed to parse GPT response. Response:\n{raw}", {"raw": raw})
        self.raw = raw


class SchemaViolation(RelayError):
    """The completion parsed as JSON but does not have the Epic/Stories shape."""

    def __init__(self, payload: Any, violations: list):
        super().__init__(
            "GPT returned invalid structure. Try rephrasing your prompt.",
            {
                "payload": payload,
                "violations": [v.to_dict() for v in violations],
            },
        )
        self.payload = payload
        self.violations = violations


class CompletionFailed(RelayError):
    def __init__(self, reason: str, status: Optional[int] = None):
        super().__init__("Error generating GPT response", {"reason": reason, "status": status})
        self.reason = reason
        self.status = status


class TrackerCreateFailed(RelayError):
    """A create-issue call against Jira was rejected or never completed.

    ``stage`` is ``"epic"`` or ``"story"``; for stories ``story_index`` is the
    position of the failing story in the request. Issues created before the
    failure are left in Jira and listed in ``created_story_keys``.
    """

    def __init__(
        self,
        upstream: Any,
        status: Optional[int] = None,
        stage: str = "epic",
        story_index: Optional[int] = None,
        epic_key: Optional[str] = None,
        created_story_keys: Optional[list[str]] = None,
    ):
        self.upstream = upstream
        self.status = status
        self.stage = stage
        self.story_index = story_index
        self.epic_key = epic_key
        self.created_story_keys = list(created_story_keys or [])
        super().__init__("Failed to create in JIRA", self._details())

    def _details(self) -> dict[str, Any]:
        return {
            "stage": self.stage,
            "storyIndex": self.story_index,
            "epicKey": self.epic_key,
            "createdStoryKeys": self.created_story_keys,
            "status": self.status,
            "upstream": self.upstream,
        }

    def at_story(self, index: int, epic_key: str, created_story_keys: list[str]) -> "TrackerCreateFailed":
        """Return a copy of this failure attributed to the story at ``index``."""
        return TrackerCreateFailed(
            self.upstream,
            status=self.status,
            stage="story",
            story_index=index,
            epic_key=epic_key,
            created_story_keys=created_story_keys,
        )


class PromptLibraryUnavailable(RelayError):
    def __init__(self, path: str, reason: str):
        super().__init__("Prompt library unavailable", {"path": path, "reason": reason})
