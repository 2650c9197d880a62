from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from faultline.filters import compile_pattern, flatten


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", populate_by_name=True)

    api_key: str = Field(default="", alias="FAULTLINE_API_KEY")
    endpoint: str = Field(default="https://api.faultline.invalid", alias="FAULTLINE_ENDPOINT")
    environment: str = Field(default="production", alias="FAULTLINE_ENVIRONMENT")
    report_enabled: bool = Field(default=True, alias="FAULTLINE_REPORT_ENABLED")
    notify_timeout_seconds: float = Field(default=5.0, alias="FAULTLINE_NOTIFY_TIMEOUT_SECONDS")
    project_root: str = Field(default_factory=lambda: str(Path.cwd()), alias="FAULTLINE_PROJECT_ROOT")

    # Exact strings, compiled re.Pattern objects or "/regex/flags" strings; may nest.
    # Stored flattened, with "/regex/flags" strings already compiled.
    ignore_user_agent: list[Any] = Field(default_factory=list, alias="FAULTLINE_IGNORE_USER_AGENT")
    # Fully qualified ("pkg.mod.Class") or bare class names.
    ignore_exceptions: list[str] = Field(default_factory=list, alias="FAULTLINE_IGNORE_EXCEPTIONS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Written by the middleware at construction time, e.g. "Starlette: 0.37.2".
    framework: str | None = Field(default=None, alias="FAULTLINE_FRAMEWORK")

    @field_validator("ignore_user_agent")
    @classmethod
    def _compile_user_agent_patterns(cls, value: list[Any]) -> list[Any]:
        # Bad patterns fail here, at startup, instead of while a request is reported.
        return [compile_pattern(pattern) for pattern in flatten(value)]

    @property
    def notices_url(self) -> str:
        return f"{self.endpoint.rstrip('/')}/v1/notices"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and self.report_enabled


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
