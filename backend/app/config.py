import logging
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from page_zipper import ScraperConfig
from page_zipper.config import default_workspace_root


class Settings(BaseSettings):
    """Server settings, read from HOST, PORT, LOG_LEVEL, CORS_ORIGINS and WORKSPACE_ROOT."""

    host: str = '0.0.0.0'
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = 'INFO'
    # comma separated in the environment
    cors_origins: Annotated[list[str], NoDecode] = ['http://localhost:5173']
    workspace_root: Path = Field(default_factory=default_workspace_root)

    model_config = SettingsConfigDict(case_sensitive=False)

    @field_validator('log_level')
    @classmethod
    def check_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f'unknown log level: {value}')
        return value

    @field_validator('cors_origins', mode='before')
    @classmethod
    def split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(',') if origin.strip()]
        return value

    def scraper_config(self) -> ScraperConfig:
        return ScraperConfig(workspace_root=self.workspace_root)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
