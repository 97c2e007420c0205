"""Loading and validation of the profile and prompt YAML files."""
import logging
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from models.profile import Profile, PromptConfig
from services.prompt_template import PromptTemplate, TemplateSlotError

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a configuration file is missing, unreadable or invalid."""


def _read_yaml(path: str) -> Dict[str, Any]:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")
    return data


def load_profile(path: str) -> Profile:
    """
    Load the static preference profile.

    Raises:
        ConfigError: File missing, not YAML, or failing schema validation
    """
    data = _read_yaml(path)
    try:
        profile = Profile.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid profile in {path}: {e}") from e

    logger.info(f"Profile loaded for {profile.personal.name} from {path}")
    return profile


def load_prompt_config(path: str) -> PromptConfig:
    """
    Load the prompt configuration and verify its master template.

    Raises:
        ConfigError: File missing, not YAML, failing schema validation, or a
            template slot without a producer
    """
    data = _read_yaml(path)
    try:
        prompt_config = PromptConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid prompt configuration in {path}: {e}") from e

    try:
        template = PromptTemplate(prompt_config.prompt_template)
    except TemplateSlotError as e:
        raise ConfigError(f"Invalid prompt template in {path}: {e}") from e

    logger.info(
        f"Prompt configuration loaded from {path}: {len(template.slots)} template slots, "
        f"languages={sorted(prompt_config.language_behavior)}"
    )
    return prompt_config
