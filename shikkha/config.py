"""
Runtime configuration for Shikkha.

Settings are read once at startup (from .env and the process environment)
into a ShikkhaConfig that is passed explicitly to the store and session.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


DEFAULT_APP_ID = "project-shikkha-v2"
DEFAULT_DB_PATH = Path("data/shikkha.db")

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ShikkhaConfig(BaseModel):
    app_id: str = Field(default=DEFAULT_APP_ID, min_length=1)
    db_path: Path = DEFAULT_DB_PATH
    initial_auth_token: Optional[str] = None
    seed_path: Optional[Path] = None
    seed_in_batch: bool = False
    claim_seed: bool = False  # claim the empty collection before seeding

    @property
    def lesson_collection(self) -> str:
        return lesson_collection_path(self.app_id)


def lesson_collection_path(app_id: str) -> str:
    """Store path of the shared lesson collection for an app id."""
    return f"artifacts/{app_id}/public/data/lessons"


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUE_VALUES


def load_config(env_file: Path | None = None) -> ShikkhaConfig:
    """
    Build configuration from a .env file and the environment.

    Args:
        env_file: Optional .env path (default: search from the working dir)

    Returns:
        ShikkhaConfig with unset values left at their defaults
    """
    load_dotenv(env_file)

    values = {
        "seed_in_batch": _env_flag("SHIKKHA_SEED_IN_BATCH"),
        "claim_seed": _env_flag("SHIKKHA_CLAIM_SEED"),
    }
    if os.environ.get("SHIKKHA_APP_ID"):
        values["app_id"] = os.environ["SHIKKHA_APP_ID"]
    if os.environ.get("SHIKKHA_DB_PATH"):
        values["db_path"] = Path(os.environ["SHIKKHA_DB_PATH"])
    if os.environ.get("SHIKKHA_AUTH_TOKEN"):
        values["initial_auth_token"] = os.environ["SHIKKHA_AUTH_TOKEN"]
    if os.environ.get("SHIKKHA_SEED_PATH"):
        values["seed_path"] = Path(os.environ["SHIKKHA_SEED_PATH"])

    return ShikkhaConfig(**values)
