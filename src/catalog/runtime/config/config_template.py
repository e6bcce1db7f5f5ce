"""Load ``config.yaml`` with ``${VAR}`` placeholders resolved from the environment."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from src.catalog.runtime.config.config_data import ConfigData

DEFAULT_CONFIG_FILE = "config.yaml"

# ${NAME}, ${NAME:-default} or ${NAME:?message}
_PLACEHOLDER = re.compile(
    r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:-|:\?)(?P<arg>[^}]*))?\}"
)


def substitute_env_vars(text: str) -> str:
    """Replace every placeholder in ``text``.

    ``${NAME}`` and ``${NAME:?message}`` raise ValueError when NAME is unset;
    ``${NAME:-default}`` falls back to ``default``.
    """

    def resolve(match: re.Match[str]) -> str:
        name, op, arg = match.group("name", "op", "arg")
        value = os.getenv(name)
        if value is not None:
            return value
        if op == ":-":
            return arg
        detail = arg if op == ":?" else "not set"
        raise ValueError(f"Required environment variable {name}: {detail}")

    return _PLACEHOLDER.sub(resolve, text)


def apply_environment_overrides(env_mode: str) -> None:
    """Expose ``<ENV>_FOO`` variables as ``FOO`` for the active environment."""
    prefix = f"{env_mode.upper()}_"
    for name, value in list(os.environ.items()):
        if name.startswith(prefix) and len(name) > len(prefix):
            os.environ[name[len(prefix):]] = value
            logger.debug("Set environment variable {} from {}", name[len(prefix):], name)


def load_templated_yaml(file_path: Path) -> ConfigData:
    """Read, substitute and validate the ``config`` section of a YAML file.

    Raises:
        ValueError: A required variable is missing or the file is not valid
            YAML or not a valid configuration.
        FileNotFoundError: The file does not exist.
    """
    content = Path(file_path).read_text()

    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration {} for environment {}", file_path, env_mode)
    apply_environment_overrides(env_mode)

    try:
        loaded = yaml.safe_load(substitute_env_vars(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not isinstance(loaded, dict):
        raise ValueError(f"{file_path} does not contain a configuration mapping")

    try:
        return ConfigData.model_validate(loaded.get("config") or {})
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def load_default_config() -> ConfigData:
    """Load ``$APP_CONFIG_FILE`` (default ``config.yaml``), or built-in defaults if absent."""
    config_path = Path(os.getenv("APP_CONFIG_FILE", DEFAULT_CONFIG_FILE))
    if not config_path.exists():
        logger.warning("{} not found; using built-in configuration defaults", config_path)
        return ConfigData()
    return load_templated_yaml(config_path)
