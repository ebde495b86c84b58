"""Configuration loader for the Speedreader application."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Speedreader"
    version: str = "1.0.0"


class IngestionConfig(BaseModel):
    """Document ingestion thresholds.

    Binary salvage thresholds are split per format: legacy ``.doc`` files
    keep shorter runs than MOBI/AZW files, whose record headers produce
    more printable noise.
    """

    doc_min_run_length: int = 10
    doc_min_output_length: int = 50
    mobi_min_run_length: int = 20
    mobi_min_output_length: int = 100
    chapter_title_max_length: int = 50


class PlaybackConfig(BaseModel):
    """RSVP playback configuration."""

    min_wpm: int = 100
    max_wpm: int = 1000
    wpm_step: int = 25
    skip_words: int = 10
    autosave_interval_seconds: float = 30.0


class StorageConfig(BaseModel):
    """Storage paths configuration."""

    sqlite_path: str = "./db/speedreader.db"
    max_sessions: int = 100


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Environment overrides
    db_path = os.getenv("SPEEDREADER_DB_PATH")
    if db_path:
        config.storage.sqlite_path = db_path
    log_level = os.getenv("SPEEDREADER_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    return config
