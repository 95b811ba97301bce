"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "SMARTBLOCKS_"


class Settings(BaseModel):
    app_name:           str = "smartblocks"
    ai_provider:        str = Field(default="local", pattern="^(local|openai)$", description="local or openai")
    ai_model:           str = Field(default="gpt-4o-mini", description="Chat model used for summaries")
    embedding_model:    str = Field(default="text-embedding-3-small", description="Embedding model name")
    embedding_dim:      int = Field(default=384, ge=1, description="Embedding vector length")
    openai_api_key:     str = Field(default="", description="API key; falls back to OPENAI_API_KEY when empty")
    openai_base_url:    Optional[str] = Field(default=None, description="OpenAI-compatible endpoint")
    summary_confidence: float = Field(default=0.85, ge=0, le=1)
    reorder_confidence: float = Field(default=0.7,  ge=0, le=1)
    processing_version: str = "1.0.0"
    batch_concurrency:  int = Field(default=1,  ge=1, description="Concurrent batch jobs; 1 = sequential")
    min_length:         int = Field(default=10, ge=0, description="Default minimum content length for extract")
    log_level:          str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then SMARTBLOCKS_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
