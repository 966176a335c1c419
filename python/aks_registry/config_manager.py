#!/usr/bin/env python3
"""
Configuration Manager for the AKS registry resolver

This module handles loading and managing configuration from config.yaml
and environment variables.
"""

import logging
import os
import re
from typing import Any, Dict

import yaml


VALID_REGISTRY_SKUS = ("Basic", "Standard", "Premium")


class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""


class ConfigManager:
    """Manages configuration for the Azure CLI registry resolver"""

    def __init__(self, config_file: str = None, validate: bool = True):
        """Initialize ConfigManager

        Args:
            config_file: Path to configuration YAML file (defaults to config.yaml or CONFIG_FILE env var)
            validate: If True, validate configuration on initialization
        """
        if config_file is None:
            config_file = os.environ.get("CONFIG_FILE", "config.yaml")
        self.config_file = config_file
        self.config = self._load_config()

        if validate:
            self.validate_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file with defaults"""
        default_config = {
            "azure": {
                "cli": "az",
                "registry_domain": "azurecr.io",
                "registry_sku": "Standard",
                "reader_role": "Reader",
            },
            "command": {
                "timeout": 300,  # Timeout for az calls in seconds
            },
        }

        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r") as f:
                    user_config = yaml.safe_load(f) or {}
                return self._merge_config(default_config, user_config)
            else:
                logging.warning(f"Config file {self.config_file} not found, using defaults")
                return default_config
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Error loading config file: {e}")
            return default_config

    def _merge_config(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge user config with defaults"""
        result = default.copy()
        for key, value in user.items():
            # An empty YAML key ("azure:") keeps the defaults
            if value is None:
                continue
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    # Azure CLI configuration
    def get_cli(self) -> str:
        """Get the Azure CLI program name or path"""
        return os.environ.get("AZURE_CLI") or self.config["azure"]["cli"]

    def get_registry_domain(self) -> str:
        """Get the login server domain suffix of managed registries"""
        return os.environ.get("AZURE_REGISTRY_DOMAIN") or self.config["azure"]["registry_domain"]

    def get_registry_sku(self) -> str:
        """Get the SKU used when creating a registry"""
        return os.environ.get("AZURE_REGISTRY_SKU") or self.config["azure"]["registry_sku"]

    def get_reader_role(self) -> str:
        """Get the role granted to a cluster's client on its registry"""
        return os.environ.get("AZURE_REGISTRY_ROLE") or self.config["azure"]["reader_role"]

    def get_command_timeout(self) -> int:
        """Get timeout for az calls from environment or config, with type coercion"""
        timeout = os.environ.get("AZURE_COMMAND_TIMEOUT") or self.config.get("command", {}).get("timeout", 300)
        try:
            return int(timeout)
        except (ValueError, TypeError):
            raise ConfigValidationError(
                f"command.timeout must be an integer, got: {timeout} (type: {type(timeout).__name__})"
            )

    def format_login_server(self, name: str) -> str:
        """Login server of a managed registry called name"""
        return f"{name}.{self.get_registry_domain()}"

    def validate_config(self) -> None:
        """Validate configuration values

        Raises:
            ConfigValidationError: If configuration is invalid
        """
        errors = []
        warnings = []

        cli = self.get_cli()
        if not cli or not str(cli).strip():
            errors.append("azure.cli is required and cannot be empty")

        domain = self.get_registry_domain()
        if not domain or not str(domain).strip():
            errors.append("azure.registry_domain is required and cannot be empty")
        elif not self._is_valid_domain(domain):
            errors.append(f"azure.registry_domain '{domain}' is not a valid DNS suffix")

        sku = self.get_registry_sku()
        if sku not in VALID_REGISTRY_SKUS:
            errors.append(f"azure.registry_sku must be one of {', '.join(VALID_REGISTRY_SKUS)}, got: {sku}")

        role = self.get_reader_role()
        if not role or not str(role).strip():
            errors.append("azure.reader_role is required and cannot be empty")

        try:
            timeout = self.get_command_timeout()
        except ConfigValidationError as e:
            errors.append(str(e))
        else:
            if timeout < 1:
                errors.append(f"command.timeout must be a positive integer (seconds), got: {timeout}")
            elif timeout > 3600:
                warnings.append(f"command.timeout is very high ({timeout}s), a hung az call may block for long")

        # Log warnings
        for warning in warnings:
            logging.warning(f"Configuration warning: {warning}")

        # Raise error if there are validation errors
        if errors:
            error_msg = "Configuration validation failed:\n  " + "\n  ".join(errors)
            logging.error(error_msg)
            raise ConfigValidationError(error_msg)

    def _is_valid_domain(self, domain: str) -> bool:
        """Validate registry domain format"""
        pattern = r"^[a-zA-Z0-9]([a-zA-Z0-9\-]*[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9\-]*[a-zA-Z0-9])?)*$"
        return bool(re.match(pattern, str(domain)))


# Global config manager instance
# Validation can be disabled by setting SKIP_CONFIG_VALIDATION=true environment variable
config_manager = ConfigManager(
    validate=os.environ.get("SKIP_CONFIG_VALIDATION", "").lower() not in ("true", "1", "yes")
)
