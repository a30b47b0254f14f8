"""
Configuration module for DataGuard.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional
import logging

from ..types.errors import ConfigurationError
from ..util.config import (
    get_bool_config,
    get_config_value,
    get_int_config,
    load_config_file,
    merge_configs,
    normalize_config_key,
)


AUDIT_LOGGER_TYPES = ("memory", "file", "none")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Configuration for a DataGuard decision service"""
    directory_path: Optional[str] = None
    strict_directory: bool = False
    audit_logger: str = "memory"
    audit_log_path: str = "audit.log"
    audit_max_entries: int = 1000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from DATAGUARD_* environment variables"""
        defaults = cls()
        return cls(
            directory_path=get_config_value("directory_path", defaults.directory_path),
            strict_directory=get_bool_config("strict_directory", defaults.strict_directory),
            audit_logger=get_config_value("audit_logger", defaults.audit_logger),
            audit_log_path=get_config_value("audit_log_path", defaults.audit_log_path),
            audit_max_entries=get_int_config("audit_max_entries", defaults.audit_max_entries),
            log_level=get_config_value("log_level", defaults.log_level),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create configuration from a mapping, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        normalized = {normalize_config_key(str(key)): value for key, value in data.items()}
        return cls(**{key: value for key, value in normalized.items() if key in known})

    @classmethod
    def from_file(cls, file_path: str, overrides: Optional[Dict[str, Any]] = None) -> "Config":
        """
        Create configuration from a JSON or YAML file.

        Raises:
            ConfigurationError: If the file cannot be read
        """
        try:
            data = load_config_file(file_path) or {}
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot read configuration file: {e}", config_key="config_file",
                                     config_value=file_path)
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration file must contain a mapping", config_key="config_file",
                                     config_value=file_path)
        return cls.from_dict(merge_configs(data, overrides or {}))

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level.upper())

    def validate(self) -> bool:
        """Validate the configuration"""
        if self.audit_logger not in AUDIT_LOGGER_TYPES:
            raise ConfigurationError(
                f"audit_logger must be one of: {', '.join(AUDIT_LOGGER_TYPES)}",
                config_key="audit_logger",
                config_value=self.audit_logger
            )
        if self.audit_logger == "file" and not self.audit_log_path:
            raise ConfigurationError("audit_log_path is required for file audit logging",
                                     config_key="audit_log_path")
        if not isinstance(self.audit_max_entries, int) or self.audit_max_entries <= 0:
            raise ConfigurationError("audit_max_entries must be a positive integer",
                                     config_key="audit_max_entries",
                                     config_value=self.audit_max_entries)
        if not isinstance(self.log_level, str) or self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of: {', '.join(LOG_LEVELS)}",
                                     config_key="log_level",
                                     config_value=self.log_level)
        return True
