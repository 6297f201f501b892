"""
Configuration management for adfmark.
"""

import copy
import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli

import adfmark.utils as utils

logger = logging.getLogger(__name__)

ENV_PLACEHOLDER_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_-]*)\}")

DEFAULT_CONFIG: Dict[str, Any] = {
    "logging": {
        "level": "WARNING",
        "console": True,
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
    "compiler": {
        "target": "jira",
        "pretty": False,
    },
    "targets": {
        "jira": {
            "base-url": "${ATLASSIAN_BASE_URL}",
        },
        "confluence": {},
    },
}


def replaceMatchToEnv(match: re.Match[str]) -> str:
    """Replace environment variable placeholders with actual values.

    Args:
        match: A regex match object containing the environment variable name.

    Returns:
        str: The value of the environment variable or the original placeholder
             if the variable is not set.
    """
    key = match.group(1)
    return os.getenv(key, match.group(0))


def substituteEnvVars(value: Any) -> Any:
    """Recursively substitute environment variable placeholders in configuration values.

    This function processes strings, dictionaries, and lists to replace placeholders
    in the format ${VAR_NAME} with their corresponding environment variable values.

    Args:
        value: The configuration value to process. Can be a string, dict, list, or other type.

    Returns:
        The processed value with environment variables substituted:
        - For strings: returns the string with placeholders replaced
        - For dictionaries: returns a new dict with substituted values
        - For lists: returns a new list with substituted items
        - For other types: returns the original value unchanged
    """
    if isinstance(value, str):
        return ENV_PLACEHOLDER_PATTERN.sub(replaceMatchToEnv, value)
    elif isinstance(value, dict):
        return {k: substituteEnvVars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substituteEnvVars(item) for item in value]
    return value


class ConfigManager:
    """Manages configuration loading for adfmark.

    Built-in defaults are used as the base; the main config file and then
    every ``*.toml`` file found in the config directories are merged on top.
    A missing main config file is fine, the defaults alone are a complete
    configuration.
    """

    def __init__(
        self, configPath: str = "adfmark.toml", configDirs: Optional[List[str]] = None, dotEnvFile: str = ".env"
    ):
        """Initialize ConfigManager with config file path and optional config directories."""
        self.config_path = configPath
        self.config_dirs = configDirs or []
        utils.load_dotenv(path=dotEnvFile)
        self.config = substituteEnvVars(self._loadConfig())

    def _findTomlFilesRecursive(self, directory: str) -> List[Path]:
        """Recursively find all .toml files in a directory, dood!"""
        toml_files: List[Path] = []
        dir_path = Path(directory)

        if not dir_path.exists():
            logger.warning(f"Config directory {directory} does not exist, skipping, dood!")
            return toml_files

        if not dir_path.is_dir():
            logger.warning(f"Config path {directory} is not a directory, skipping, dood!")
            return toml_files

        for toml_file in dir_path.rglob("*.toml"):
            if toml_file.is_file():
                toml_files.append(toml_file)
                logger.debug(f"Found config file: {toml_file}")

        return sorted(toml_files)  # Sort for consistent ordering

    def _mergeConfigs(self, base_config: Dict[str, Any], new_config: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two configuration dictionaries, dood!"""
        merged = base_config.copy()

        for key, value in new_config.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                # Recursively merge nested dictionaries
                merged[key] = self._mergeConfigs(merged[key], value)
            else:
                # Override with new value
                merged[key] = value

        return merged

    def _loadTomlFile(self, path: Path) -> Dict[str, Any]:
        with open(path, "rb") as f:
            return tomli.load(f)

    def _loadConfig(self) -> Dict[str, Any]:
        """
        Load configuration from the defaults, the TOML file and optional config directories.

        Returns:
            Dict[str, Any]: The loaded and merged configuration dictionary.

        Raises:
            SystemExit: If the main configuration file exists but cannot be parsed.
        """
        config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

        config_file = Path(self.config_path)
        if config_file.exists():
            try:
                config = self._mergeConfigs(config, self._loadTomlFile(config_file))
                logger.info(f"Loaded main config from {self.config_path}")
            except (OSError, tomli.TOMLDecodeError) as e:
                logger.error(f"Failed to load configuration {self.config_path}: {e}")
                sys.exit(1)
        else:
            logger.debug(f"Configuration file {self.config_path} not found, using defaults")

        # Load and merge configs from directories
        if self.config_dirs:
            logger.info(f"Scanning {len(self.config_dirs)} config directories for .toml files, dood!")

            for config_dir in self.config_dirs:
                toml_files = self._findTomlFilesRecursive(config_dir)
                logger.info(f"Found {len(toml_files)} .toml files in {config_dir}")

                for toml_file in toml_files:
                    try:
                        config = self._mergeConfigs(config, self._loadTomlFile(toml_file))
                        logger.info(f"Merged config from {toml_file}")
                    except (OSError, tomli.TOMLDecodeError) as e:
                        logger.error(f"Failed to load config file {toml_file}: {e}")
                        # Continue with other files instead of exiting

        return config

    def get(self, key: str, default=None) -> Any:
        """Get configuration value by key."""
        return self.config.get(key, default)

    def getLoggingConfig(self) -> Dict[str, Any]:
        """Get logging-specific configuration."""
        return self.get("logging", {})

    def getCompilerConfig(self) -> Dict[str, Any]:
        """Get compiler defaults (target, pretty)."""
        return self.get("compiler", {})

    def getTargetConfig(self, target: str) -> Dict[str, Any]:
        """
        Get per-target settings.

        Values still holding an unresolved ``${VAR}`` placeholder (the variable
        is not set) are dropped, so built-in defaults apply instead.

        Args:
            target: Target platform name

        Returns:
            Dict with target settings (e.g. ``base-url``)
        """
        targetConfig = self.get("targets", {}).get(target, {})
        return {
            key: value
            for key, value in targetConfig.items()
            if not (isinstance(value, str) and (not value or ENV_PLACEHOLDER_PATTERN.search(value)))
        }
