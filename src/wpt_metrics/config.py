"""
Configuration management for WPT metrics computation.
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from .classifiers import CLASSIFIERS

logger = logging.getLogger(__name__)

# Module-level lock for thread-safe config loading
_config_lock = threading.Lock()

REPORT_FORMATS = ["console", "json"]


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


@dataclass
class MetricsConfig:
    """Main configuration for metrics computation.

    Example config YAML::

        browser_count: 4
        pass_policy: lenient
        report_format: json
        timeout_seconds: 120
        failure_browsers:
          - chrome
          - firefox
    """

    # Size of the agreed browser set; None means "every browser seen in the input"
    browser_count: Optional[int] = None
    pass_policy: str = "strict"

    # Browser-unique failure lists
    compute_failures: bool = True
    failure_browsers: List[str] = field(default_factory=list)

    timeout_seconds: Optional[float] = None

    # Reporting configuration
    report_format: str = "console"  # console, json
    console_max_rows: int = 20


def _parse_env_int(var_name: str) -> Optional[int]:
    """
    Safely parse an integer from an environment variable.

    Args:
        var_name: Name of the environment variable

    Returns:
        Parsed integer value, or None if the variable is not set

    Raises:
        ConfigurationError: If the value cannot be parsed as an integer
    """
    value = os.environ.get(var_name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(
            f"Environment variable {var_name} must be a valid integer, got: '{value}'"
        )


def _parse_env_float(var_name: str) -> Optional[float]:
    value = os.environ.get(var_name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(
            f"Environment variable {var_name} must be a number, got: '{value}'"
        )


def load_config(config_file: Optional[str] = None) -> MetricsConfig:
    """
    Load configuration from file and environment variables.

    Configuration precedence (highest to lowest):
    1. Environment variables
    2. Configuration file
    3. Default values

    Args:
        config_file: Path to YAML configuration file (optional)

    Returns:
        MetricsConfig object with merged configuration

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist
        ConfigurationError: If config file has invalid YAML or env vars are invalid
    """
    with _config_lock:
        config_data: Dict[str, Any] = {}

        if config_file:
            logger.info("Loading configuration from %s", config_file)
            try:
                with open(config_file, "r") as f:
                    file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in config file '{config_file}': {e}")
            except FileNotFoundError:
                raise FileNotFoundError(f"Configuration file not found: {config_file}")
            except PermissionError:
                raise ConfigurationError(f"Permission denied reading config file '{config_file}'")
            except OSError as e:
                raise ConfigurationError(f"Unable to read config file '{config_file}': {e}")
            if not isinstance(file_config, dict):
                raise ConfigurationError(
                    f"Config file '{config_file}' must contain a mapping at the top level"
                )
            config_data.update(file_config)

        env_overrides = _load_from_env()
        config_data.update(env_overrides)
        if env_overrides:
            logger.debug("Applied environment variable overrides: %s", list(env_overrides.keys()))

        try:
            return MetricsConfig(**config_data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")


def _load_from_env() -> Dict[str, Any]:
    """
    Load configuration from environment variables.

    Supported environment variables:
    - WPT_METRICS_BROWSER_COUNT: Size of the agreed browser set
    - WPT_METRICS_POLICY: Pass classification policy (strict, lenient)
    - WPT_METRICS_REPORT_FORMAT: Report format (console, json)
    - WPT_METRICS_TIMEOUT: Computation deadline in seconds

    Returns:
        Dictionary of configuration values from environment

    Raises:
        ConfigurationError: If environment variable values are invalid
    """
    env_config: Dict[str, Any] = {}

    browser_count = _parse_env_int("WPT_METRICS_BROWSER_COUNT")
    if browser_count is not None:
        env_config["browser_count"] = browser_count

    if "WPT_METRICS_POLICY" in os.environ:
        env_config["pass_policy"] = os.environ["WPT_METRICS_POLICY"]

    if "WPT_METRICS_REPORT_FORMAT" in os.environ:
        env_config["report_format"] = os.environ["WPT_METRICS_REPORT_FORMAT"]

    timeout = _parse_env_float("WPT_METRICS_TIMEOUT")
    if timeout is not None:
        if timeout <= 0:
            raise ConfigurationError(
                f"Environment variable WPT_METRICS_TIMEOUT must be positive, got: {timeout}"
            )
        env_config["timeout_seconds"] = timeout

    return env_config


def validate_config(config: MetricsConfig) -> List[str]:
    """
    Validate configuration and return list of errors.

    Args:
        config: MetricsConfig to validate

    Returns:
        List of error messages (empty if valid)
    """
    errors: List[str] = []

    if config.browser_count is not None and config.browser_count < 0:
        errors.append(f"browser_count must not be negative: {config.browser_count}")

    if config.pass_policy not in CLASSIFIERS:
        errors.append(
            f"pass_policy must be one of {sorted(CLASSIFIERS)}: {config.pass_policy}"
        )

    if config.report_format not in REPORT_FORMATS:
        errors.append(f"report_format must be one of {REPORT_FORMATS}: {config.report_format}")

    if config.timeout_seconds is not None and config.timeout_seconds <= 0:
        errors.append(f"timeout_seconds must be positive: {config.timeout_seconds}")

    if config.console_max_rows < 0:
        errors.append(f"console_max_rows must not be negative: {config.console_max_rows}")

    for i, browser in enumerate(config.failure_browsers):
        if not browser:
            errors.append(f"failure_browsers[{i}] is empty")

    return errors
