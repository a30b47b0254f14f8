"""
Audit logging module for DataGuard access decisions.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from datetime import datetime
import asyncio
import json
import logging
import uuid
from collections import deque


logger = logging.getLogger(__name__)


@dataclass
class AuditEvent:
    """Audit event for access decisions and directory changes"""
    event_id: str
    event_type: str  # e.g., "access_decision", "directory_loaded"
    user_id: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    decision: Optional[str] = None  # "Allowed", "Denied" or "Indeterminate"
    resource: Optional[str] = None  # data source / qualified table
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.event_id:
            self.event_id = str(uuid.uuid4())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "user_id": self.user_id,
            "timestamp": self.timestamp.isoformat(),
            "decision": self.decision,
            "resource": self.resource,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditEvent":
        return cls(
            event_id=data["event_id"],
            event_type=data["event_type"],
            user_id=data.get("user_id"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            decision=data.get("decision"),
            resource=data.get("resource"),
            details=data.get("details", {}),
        )

    def matches(
        self,
        user_id: Optional[str] = None,
        event_type: Optional[str] = None,
        decision: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> bool:
        """Check the event against optional filters"""
        if user_id and (self.user_id or "").lower() != user_id.lower():
            return False
        if event_type and self.event_type != event_type:
            return False
        if decision and self.decision != decision:
            return False
        if start_time and self.timestamp < start_time:
            return False
        if end_time and self.timestamp > end_time:
            return False
        return True


class AuditLogger(ABC):
    """Abstract base class for audit logging"""

    @abstractmethod
    async def log(self, event: AuditEvent) -> None:
        """Log an audit event"""
        pass

    @abstractmethod
    async def get_events(
        self,
        user_id: Optional[str] = None,
        event_type: Optional[str] = None,
        decision: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """Retrieve audit events with optional filtering"""
        pass

    async def close(self) -> None:
        """Close the audit logger and release resources"""
        pass


class NullAuditLogger(AuditLogger):
    """Audit logger that discards every event"""

    async def log(self, event: AuditEvent) -> None:
        pass

    async def get_events(
        self,
        user_id: Optional[str] = None,
        event_type: Optional[str] = None,
        decision: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        return []


class MemoryAuditLogger(AuditLogger):
    """In-memory audit logger for development and testing"""

    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self.events: deque = deque(maxlen=max_entries)
        self._lock = asyncio.Lock()

    async def log(self, event: AuditEvent) -> None:
        """Log an audit event to memory"""
        async with self._lock:
            self.events.append(event)

    async def get_events(
        self,
        user_id: Optional[str] = None,
        event_type: Optional[str] = None,
        decision: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """Retrieve audit events with optional filtering"""
        async with self._lock:
            return [
                event for event in self.events
                if event.matches(user_id, event_type, decision, start_time, end_time)
            ]


class FileAuditLogger(AuditLogger):
    """File-based audit logger writing one JSON document per line"""

    def __init__(self, file_path: str):
        self.file_path = file_path
        self._lock = asyncio.Lock()

    async def log(self, event: AuditEvent) -> None:
        """Log an audit event to file"""
        async with self._lock:
            try:
                with open(self.file_path, "a", encoding="utf-8") as f:
                    f.write(json.dumps(event.to_dict()) + "\n")
            except OSError as e:
                logger.error(f"Failed to write audit log {self.file_path}: {e}")

    async def get_events(
        self,
        user_id: Optional[str] = None,
        event_type: Optional[str] = None,
        decision: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """Retrieve audit events from file with optional filtering"""
        events = []

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                for line_number, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        event = AuditEvent.from_dict(json.loads(line))
                    except (json.JSONDecodeError, KeyError, ValueError) as e:
                        logger.warning(f"Skipping malformed audit line {line_number} in {self.file_path}: {e}")
                        continue

                    if event.matches(user_id, event_type, decision, start_time, end_time):
                        events.append(event)

        except FileNotFoundError:
            # Nothing logged yet
            pass

        return events


def create_audit_logger(logger_type: str = "memory", **kwargs) -> AuditLogger:
    """
    Factory function to create audit loggers

    Args:
        logger_type: Type of logger ("memory", "file" or "none")
        **kwargs: Additional arguments for the logger

    Returns:
        AuditLogger instance
    """
    if logger_type == "memory":
        max_entries = kwargs.get("max_entries", 1000)
        return MemoryAuditLogger(max_entries)
    elif logger_type == "file":
        file_path = kwargs.get("file_path", "audit.log")
        return FileAuditLogger(file_path)
    elif logger_type == "none":
        return NullAuditLogger()
    else:
        raise ValueError(f"Unknown logger type: {logger_type}")
