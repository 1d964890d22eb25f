import logging

from errors import TrackerCreateFailed
from models import PublicationRequest, PublicationResult
from services.jira_payloads import build_epic_payload, build_story_payload
from services.jira_service import JiraService

logger = logging.getLogger(__name__)


class PublicationService:
    """
    Pushes an epic and its stories to Jira.

    The epic is created first because every story references its key as
    parent; stories follow one at a time in request order. The first failure
    stops the run and nothing already created is rolled back. Publishing the
    same request twice creates the issues twice.
    """

    def __init__(self, jira: JiraService, epic_name_field: str = ""):
        self.jira = jira
        self.epic_name_field = epic_name_field

    async def publish(self, request: PublicationRequest) -> PublicationResult:
        logger.info(
            f"Publishing epic '{request.epic.summary}' with {len(request.stories)} stories "
            f"to {request.project_key} for {request.jira_user}"
        )

        epic_payload = build_epic_payload(
            request.epic, request.project_key, request.jira_label, self.epic_name_field
        )
        epic_issue = await self.jira.create_issue(epic_payload)
        epic_key = epic_issue["key"]

        created_story_keys: list[str] = []
        for index, story in enumerate(request.stories):
            story_payload = build_story_payload(story, request.project_key, request.jira_label, epic_key)
            try:
                story_issue = await self.jira.create_issue(story_payload)
            except TrackerCreateFailed as exc:
                logger.error(
                    f"Story {index} of epic {epic_key} failed; "
                    f"{len(request.stories) - index - 1} remaining stories skipped"
                )
                raise exc.at_story(index, epic_key, created_story_keys) from exc
            created_story_keys.append(story_issue["key"])

        logger.info(f"Created epic {epic_key} with stories {created_story_keys}")
        return PublicationResult(epicKey=epic_key)
