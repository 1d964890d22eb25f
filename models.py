from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must contain a non-whitespace character")
    return value


NonEmptyStr = Annotated[str, Field(min_length=1), AfterValidator(_not_blank)]


class GenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    persona: NonEmptyStr
    edge: NonEmptyStr
    project_key: NonEmptyStr = Field(alias="projectKey")
    jira_user: NonEmptyStr = Field(alias="jiraUser")
    jira_label: NonEmptyStr = Field(alias="jiraLabel")
    prompt: NonEmptyStr


class Epic(BaseModel):
    model_config = ConfigDict(extra="allow")

    summary: NonEmptyStr
    description: NonEmptyStr


class Story(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    summary: NonEmptyStr
    description: NonEmptyStr
    acceptance_criteria: Optional[list[str]] = Field(default=None, alias="acceptanceCriteria")
    tasks: Optional[list[str]] = None


class AgileResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    epic: Epic
    stories: list[Story]

    def to_json(self) -> dict:
        """Dump back to the shape the completion produced, camelCase and without unset keys."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class PublicationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    epic: Epic
    stories: list[Story]
    project_key: NonEmptyStr = Field(alias="projectKey")
    jira_label: NonEmptyStr = Field(alias="jiraLabel")
    jira_user: NonEmptyStr = Field(alias="jiraUser")


class PublicationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Created in JIRA"
    epic_key: str = Field(alias="epicKey")


class ErrorResponse(BaseModel):
    error: str
    details: dict = {}


class HealthResponse(BaseModel):
    status: str
    jira: str
    completion: str
