import tomllib
import os
import logging
from typing import Dict, Any

from purler.types import fold_case, get_type_policy, policy_from_settings, register_type_policy

CONFIG_FILE_PATH = "pyproject.toml"

DEFAULT_PURLER_CONFIG = {
    "logging_level": "WARNING",
    "type_policies": {},  # type name -> TypePolicy flags, see purler.types
}

def get_logging_level_from_string(level_str: str) -> int:
    """Converts a logging level string to its integer value."""
    return getattr(logging, level_str.upper(), logging.INFO)

def load_purler_config(config_file_path: str = CONFIG_FILE_PATH) -> Dict[str, Any]:
    """
    Loads purler configuration from the [tool.purler] table of pyproject.toml.
    Falls back to default values if the file or specific keys are not found.
    The `PURLER_LOGGING_LEVEL` environment variable overrides the logging level.
    """
    config = DEFAULT_PURLER_CONFIG.copy()
    config["type_policies"] = {}

    try:
        with open(config_file_path, "rb") as f:
            data = tomllib.load(f)
            tool_purler_config = data.get("tool", {}).get("purler", {})

            config["logging_level"] = tool_purler_config.get("logging_level", config["logging_level"])

            types_settings = tool_purler_config.get("types", {})
            if isinstance(types_settings, dict):
                for purl_type, settings in types_settings.items():
                    if isinstance(settings, dict):
                        config["type_policies"][purl_type] = settings
                    else:
                        logging.getLogger(__name__).warning(
                            f"Invalid format for [tool.purler.types.{purl_type}] in {config_file_path}. "
                            f"Expected a table, got: {settings!r}"
                        )
            else:
                logging.getLogger(__name__).warning(
                    f"Invalid format for [tool.purler.types] in {config_file_path}. Expected a table of tables."
                )

    except FileNotFoundError:
        logging.getLogger(__name__).info(f"{config_file_path} not found. Using default configurations.")
    except tomllib.TOMLDecodeError:
        logging.getLogger(__name__).error(f"Error decoding {config_file_path}. Using default configurations.")

    # Environment variables override pyproject.toml settings.
    config["logging_level"] = os.getenv("PURLER_LOGGING_LEVEL", config["logging_level"])

    # Convert logging_level string to its integer representation.
    config["logging_level_int"] = get_logging_level_from_string(str(config["logging_level"]))

    return config

def apply_type_policies(config: Dict[str, Any]) -> None:
    """Registers the type policies found in a loaded configuration.

    Flags override the current policy of the type; its rules are kept.
    """
    for purl_type, settings in config.get("type_policies", {}).items():
        base = get_type_policy(fold_case(purl_type.strip()))
        register_type_policy(purl_type, policy_from_settings(settings, base))
        logging.getLogger(__name__).debug(f"Registered type policy for '{purl_type}' from configuration")

# Load configuration once when the module is imported.
PURLER_CONFIG = load_purler_config()
