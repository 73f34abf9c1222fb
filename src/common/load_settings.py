import os

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from schema.retro_models import RetroConfig

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "retro_config.yaml"
)


class RetroConfigError(ValueError):
    """Raised when a retro configuration file cannot be read or validated."""


def load_settings():
    """Load settings from environment variables"""
    load_dotenv()
    return {
        "retro_config_path": os.environ.get("RETRO_CONFIG_PATH", DEFAULT_CONFIG_PATH),
        "retro_store_path": os.environ.get("RETRO_STORE_PATH"),
        "max_field_length": int(os.environ.get("RETRO_MAX_FIELD_LENGTH", 2000)),
    }


def load_retro_config(path: str | None = None) -> RetroConfig:
    """
    Load and validate the retro configuration from a YAML file.

    Args:
        path: YAML file to read. Defaults to RETRO_CONFIG_PATH, then to the
            bundled retro_config.yaml.

    Returns:
        RetroConfig: Frozen configuration shared by every extraction call

    Raises:
        RetroConfigError: If the file is missing, is not valid YAML, or does not
            describe a valid configuration
    """
    if path is None:
        path = load_settings()["retro_config_path"]

    if not os.path.exists(path):
        raise RetroConfigError(f"Retro config file does not exist: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RetroConfigError(f"Invalid YAML in retro config {path}: {e}")
    except OSError as e:
        raise RetroConfigError(f"Failed to read retro config {path}: {e}")

    if not isinstance(raw, dict):
        raise RetroConfigError(f"Retro config {path} must be a mapping")

    try:
        return RetroConfig.model_validate(raw)
    except ValidationError as e:
        raise RetroConfigError(f"Invalid retro config {path}: {e}")
