import logging

from models import AgileResponse, GenerationRequest
from services.llm_service import CompletionClient
from services.response_validator import parse_agile_response

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful product owner writing Agile EPICs and user stories."


class GenerationService:
    def __init__(self, completion_client: CompletionClient):
        self.completion_client = completion_client

    async def generate(self, request: GenerationRequest) -> AgileResponse:
        logger.info(
            f"Generating epic for project {request.project_key} "
            f"(persona: {request.persona}, user: {request.jira_user}, prompt length {len(request.prompt)})"
        )
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": request.prompt},
        ]
        text = await self.completion_client.complete(messages)
        agile = parse_agile_response(text)
        logger.info(f"Completion produced epic '{agile.epic.summary}' with {len(agile.stories)} stories")
        return agile
