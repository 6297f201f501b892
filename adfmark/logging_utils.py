"""
Logging utilities for adfmark.

Diagnostics always go to stderr (or a log file): stdout is reserved for
the JSON documents the CLI produces.
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def getLogLevelByStr(levelStr: str, default: Optional[int] = None) -> Optional[int]:
    """Get log level by string."""
    level = getattr(logging, str(levelStr).upper(), None)
    if not isinstance(level, int):
        logger.error(f"Invalid log level '{levelStr}'")
        return default
    return level


def configureLogger(localLogger: logging.Logger, config: Dict[str, Any]) -> None:
    """Configure individual logger from config file settings."""

    if "propagate" in config:
        localLogger.propagate = bool(config["propagate"])

    # Configure log level
    if "level" in config:
        logLevel = getLogLevelByStr(config["level"])
        if logLevel is not None:
            localLogger.setLevel(logLevel)

    logLevel = localLogger.getEffectiveLevel()

    formatter = logging.Formatter(config.get("format", DEFAULT_FORMAT))

    # Clear existing handlers to avoid duplicates
    for handler in localLogger.handlers[:]:
        localLogger.removeHandler(handler)

    # Add console handler, stderr only
    if config.get("console", False):
        consoleLogLevel = logLevel
        if "console-level" in config:
            consoleLogLevel = getLogLevelByStr(config["console-level"], logLevel) or logLevel
        consoleHandler = logging.StreamHandler(sys.stderr)
        consoleHandler.setLevel(consoleLogLevel)
        consoleHandler.setFormatter(formatter)
        localLogger.addHandler(consoleHandler)
        logger.debug(f"Logging {localLogger.name} to console, logLevel: {consoleLogLevel}")

    # Add file handler if specified
    if "file" in config:
        logFile = config["file"]
        try:
            # Create log directory if it doesn't exist
            Path(logFile).parent.mkdir(parents=True, exist_ok=True)

            fileLogLevel = logLevel
            if "file-level" in config:
                fileLogLevel = getLogLevelByStr(config["file-level"], logLevel) or logLevel

            fileHandler: logging.Handler
            if config.get("rotate", False):
                fileHandler = TimedRotatingFileHandler(
                    filename=logFile,
                    when="midnight",
                    interval=1,
                    backupCount=7,
                    encoding="utf-8",
                )
            else:
                fileHandler = logging.FileHandler(logFile, encoding="utf-8")

            fileHandler.setLevel(fileLogLevel)
            fileHandler.setFormatter(formatter)
            localLogger.addHandler(fileHandler)
            logger.debug(f"Logging {localLogger.name} to file: {logFile}, logLevel: {fileLogLevel}")
        except OSError as e:
            logger.error(f"Failed to setup file logging for {localLogger.name}: {e}")


def initLogging(config: Dict[str, Any], levelOverride: Optional[str] = None) -> None:
    """
    Configure logging from config file settings.

    Args:
        config: The ``[logging]`` config section
        levelOverride: Root level taking precedence over the config (e.g. from ``--verbose``)
    """
    rootConfig = dict(config)
    rootConfig.pop("logger", None)
    if levelOverride:
        rootConfig["level"] = levelOverride

    rootLogger = logging.getLogger()
    rootLogger.setLevel(logging.WARNING)
    configureLogger(rootLogger, rootConfig)

    logConfigs = config.get("logger", {})
    for loggerName, loggerConfig in logConfigs.items():
        logger.debug(f"Configuring logger '{loggerName}' with config {loggerConfig}")
        configureLogger(logging.getLogger(loggerName), loggerConfig)

    logger.debug(f"Logging configured: root level={rootLogger.getEffectiveLevel()}")
