import logging
import sys

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, get_settings

settings = get_settings()

# Configure logging to output to console
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)
from errors import MissingField, RelayError
from models import (
    ErrorResponse,
    GenerationRequest,
    HealthResponse,
    PublicationRequest,
    PublicationResult,
)
from services.generation import GenerationService
from services.jira_service import JiraService
from services.llm_service import CompletionClient
from services.prompt_library import load_prompt_library
from services.publication import PublicationService

app = FastAPI(title="Agile Epic Generator ↔ Jira Relay")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_completion_client(settings: Settings = Depends(get_settings)) -> CompletionClient:
    return CompletionClient(settings)


def get_jira_service(settings: Settings = Depends(get_settings)) -> JiraService:
    return JiraService(settings)


def get_generation_service(
    completion_client: CompletionClient = Depends(get_completion_client),
) -> GenerationService:
    return GenerationService(completion_client)


def get_publication_service(
    jira: JiraService = Depends(get_jira_service),
    settings: Settings = Depends(get_settings),
) -> PublicationService:
    return PublicationService(jira, epic_name_field=settings.jira_epic_name_field)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    violations = [
        {"field": ".".join(str(part) for part in err["loc"] if part != "body"), "reason": err["msg"]}
        for err in exc.errors()
    ]
    logger.error(f"Validation error for {request.url}: {violations}")
    error = MissingField(violations)
    return JSONResponse(status_code=error.status_code, content=jsonable_encoder(error.to_dict()))


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.get("/api/test")
async def test_route():
    return {"message": "Test route working! ✅"}


@app.get("/api/jira/test")
async def jira_test_route(settings: Settings = Depends(get_settings)):
    return {"message": f"JIRA Create route working! ✅ Base URL: {settings.jira_base_url}"}


@app.get("/api/prompts")
async def prompts(settings: Settings = Depends(get_settings)):
    return load_prompt_library(settings.prompts_path)


@app.post("/generate", responses=ERROR_RESPONSES)
@app.post("/api/generate-upload", responses=ERROR_RESPONSES, include_in_schema=False)
async def generate(req: GenerationRequest, service: GenerationService = Depends(get_generation_service)):
    logger.info(f"received request to generate epic for project {req.project_key} with label {req.jira_label}")
    agile = await service.generate(req)
    return JSONResponse(status_code=200, content=agile.to_json())


@app.post("/publish", response_model=PublicationResult, responses=ERROR_RESPONSES)
@app.post("/api/jira/create", response_model=PublicationResult, responses=ERROR_RESPONSES, include_in_schema=False)
async def publish(req: PublicationRequest, service: PublicationService = Depends(get_publication_service)):
    logger.info(f"received request to publish epic '{req.epic.summary}' to {req.project_key}")
    return await service.publish(req)


@app.get("/api/v1/health", response_model=HealthResponse)
async def health(
    jira: JiraService = Depends(get_jira_service),
    completion_client: CompletionClient = Depends(get_completion_client),
):
    jira_ok = await jira.check_connectivity()
    llm_ok = await completion_client.check_connectivity()
    overall = "healthy" if (jira_ok and llm_ok) else "degraded"
    return HealthResponse(
        status=overall,
        jira="connected" if jira_ok else "unreachable",
        completion="connected" if llm_ok else "unreachable",
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level="info")
