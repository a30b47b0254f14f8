"""
Main DataGuard service.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

Wraps the pure decision engine with the parts a running service needs:
a swappable directory snapshot, configuration and an audit trail.
"""

import uuid
from typing import Any, Dict, Optional, Union
import logging

from .config import Config
from ..audit.logger import AuditEvent, AuditLogger, create_audit_logger
from ..authz.directory import RoleDirectory
from ..authz.engine import DecisionEngine
from ..authz.resources import qualified_table_name
from ..authz.types import AccessRequest, DecisionResult, nonempty
from ..common.messages import EventTypes
from ..types.errors import ConfigurationError


class DataGuard:
    """
    Access decision service for data-access requests.
    Use DataGuard.new() to construct an instance.
    """

    def __init__(
        self,
        config: Config,
        directory: Optional[RoleDirectory] = None,
        audit_logger: Optional[AuditLogger] = None,
        engine: Optional[DecisionEngine] = None,
    ):
        """
        Initialize DataGuard instance.

        Args:
            config: DataGuard configuration
            directory: Initial directory snapshot (defaults to an empty directory)
            audit_logger: Audit logging implementation (defaults to in-memory)
            engine: Decision engine (defaults to the standard engine)
        """
        self.config = config
        self.logger = logging.getLogger(__name__)
        if directory is None:
            self.logger.warning("No directory supplied; every user is unknown until a directory is loaded")
            directory = RoleDirectory()
        self._directory = directory
        self.audit_logger = audit_logger or create_audit_logger(
            config.audit_logger,
            max_entries=config.audit_max_entries,
            file_path=config.audit_log_path,
        )
        self.engine = engine or DecisionEngine()

    @classmethod
    def new(
        cls,
        config: Config,
        directory: Optional[RoleDirectory] = None,
        audit_logger: Optional[AuditLogger] = None,
    ) -> "DataGuard":
        """
        Create a new DataGuard instance.

        When no directory is given and ``config.directory_path`` is set, the
        directory is loaded from that file.

        Raises:
            ConfigurationError: If configuration is invalid
            DirectoryError: If the directory file is missing or corrupt

        Example:
            guard = DataGuard.new(Config(directory_path="directory.yaml"))
        """
        config.validate()
        if directory is None and config.directory_path:
            directory = RoleDirectory.from_file(config.directory_path, strict=config.strict_directory)
        return cls(config, directory, audit_logger)

    @property
    def directory(self) -> RoleDirectory:
        """The current directory snapshot"""
        return self._directory

    def replace_directory(self, directory: RoleDirectory) -> None:
        """Swap in a new directory snapshot; in-flight evaluations keep the old one"""
        self._directory = directory
        self.logger.info(f"Directory replaced: {directory!r}")

    async def reload(self) -> RoleDirectory:
        """
        Reload the directory from ``config.directory_path``.

        The current snapshot stays in place if loading fails.

        Raises:
            ConfigurationError: If no directory path is configured
            DirectoryError: If the directory file is missing or corrupt
        """
        if not self.config.directory_path:
            raise ConfigurationError("directory_path is required to reload the directory",
                                     config_key="directory_path")
        directory = RoleDirectory.from_file(self.config.directory_path, strict=self.config.strict_directory)
        self.replace_directory(directory)

        await self.audit_logger.log(AuditEvent(
            event_id=str(uuid.uuid4()),
            event_type=EventTypes.DIRECTORY_LOADED,
            resource=self.config.directory_path,
            details={
                "users": len(directory.users),
                "roles": len(directory.roles),
            }
        ))
        return directory

    async def evaluate(self, request: Union[AccessRequest, Dict[str, Any]]) -> DecisionResult:
        """
        Evaluate an access request and record the decision.

        Args:
            request: Access request, as an object or in dictionary form

        Returns:
            DecisionResult for the request

        Example:
            result = await guard.evaluate({
                "user_id": "alice",
                "request": {"method": "GET"},
                "query": {"query_type": "SELECT", "data_source": "aurora",
                          "query_sql": "select 1"},
            })
        """
        if not isinstance(request, AccessRequest):
            request = AccessRequest.from_dict(request)

        directory = self._directory
        result = self.engine.evaluate(request, directory)

        await self.audit_logger.log(AuditEvent(
            event_id=str(uuid.uuid4()),
            event_type=EventTypes.ACCESS_DECISION,
            user_id=request.user_id,
            decision=result.decision.value,
            resource=self._describe_resource(request),
            details={
                "reason": result.reason.value,
                "method": request.request.method,
                "query_type": request.query.query_type,
                "columns": list(request.columns) if request.columns is not None else None,
            }
        ))
        return result

    async def authorize(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Evaluate a request dictionary and return ``{"Decision": ..., "Message": ...}``"""
        result = await self.evaluate(data)
        return result.to_dict()

    async def close(self) -> None:
        """Release any resources held by DataGuard."""
        await self.audit_logger.close()

    @staticmethod
    def _describe_resource(request: AccessRequest) -> Optional[str]:
        query = request.query
        if not nonempty(query.data_source):
            return None
        if not nonempty(query.table):
            return query.data_source.lower()
        return f"{query.data_source.lower()}:{qualified_table_name(query.instance, query.table)}"
