from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    openai_api_key: str = "your-openai-api-key"
    completion_base_url: str = "https://api.openai.com"
    completion_model: str = "gpt-4"
    completion_temperature: float = 0.7
    completion_timeout: float = 300

    jira_base_url: str = "https://your-domain.atlassian.net"
    jira_email: str = "your-jira-email"
    jira_api_token: str = "your-jira-api-token"
    # Epic Name custom field; differs between Jira instances
    jira_epic_name_field: str = "customfield_10011"
    jira_timeout: float = 60

    port: int = 3000
    cors_origins: list[str] = ["https://vatsanchetlur.github.io"]
    prompts_path: Path = Path(__file__).parent / "data" / "prompts.json"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
