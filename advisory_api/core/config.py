from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Advisory Review API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"
    max_upload_size_mb: int = 25

    # Document storage
    documents_dir: Path = Field(default=Path("./data/advisory"), alias="DOCUMENTS_DIR")
    reference_docs_dir: Path = Field(
        default=Path("./data/reference-docs"), alias="REFERENCE_DOCS_DIR",
    )  # 16 reference agreements with "XXXXXX" placeholders
    generated_dir: Path = Field(default=Path("./data/generated"), alias="GENERATED_DIR")

    # OpenAI
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4.1-mini", alias="OPENAI_MODEL")
    openai_max_tokens: int = Field(default=2000, alias="OPENAI_MAX_TOKENS")
    openai_timeout: int = Field(default=60, alias="OPENAI_TIMEOUT")

    # Orion (account ledger)
    orion_api_url: str = Field(default="https://orion-api.example.com", alias="ORION_API_URL")
    orion_api_key: str | None = Field(default=None, alias="ORION_API_KEY")
    orion_timeout: float = Field(default=30.0, alias="ORION_TIMEOUT")

    # Jira (ticketing)
    jira_base_url: str = Field(default="https://your-org.atlassian.net", alias="JIRA_BASE_URL")
    jira_user_email: str | None = Field(default=None, alias="JIRA_USER_EMAIL")
    jira_api_token: str | None = Field(default=None, alias="JIRA_API_TOKEN")
    jira_project_key: str = Field(default="ADV", alias="JIRA_PROJECT_KEY")
    jira_new_status: str = Field(default="New", alias="JIRA_NEW_STATUS")
    jira_timeout: float = Field(default=30.0, alias="JIRA_TIMEOUT")

    # Outbound call policy. 1 = fail fast, no retry.
    integration_max_attempts: int = Field(default=1, ge=1, alias="INTEGRATION_MAX_ATTEMPTS")
    integration_retry_wait: float = Field(default=1.0, ge=0.0, alias="INTEGRATION_RETRY_WAIT")

    # An unchecked box counts as a missing field unless this is disabled
    treat_false_as_missing: bool = Field(
        default=True, alias="ADVISORY_TREAT_FALSE_AS_MISSING",
    )

    # Database (SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./advisory_dev.db",
        alias="DATABASE_URL",
    )

    # Multi-tenancy default
    default_client_id: str = Field(default="default", alias="DEFAULT_CLIENT_ID")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def processed_dir(self) -> Path:
        return self.documents_dir / "processed"

    @property
    def ai_enabled(self) -> bool:
        """AI extraction is available only when an OpenAI key is configured."""
        return bool(self.openai_api_key)

    @property
    def orion_enabled(self) -> bool:
        return bool(self.orion_api_key)

    @property
    def jira_enabled(self) -> bool:
        return bool(self.jira_api_token and self.jira_user_email)

settings = Settings()
