"""
Audit module initialization
"""

from .logger import (
    AuditEvent,
    AuditLogger,
    NullAuditLogger,
    MemoryAuditLogger,
    FileAuditLogger,
    create_audit_logger,
)

__all__ = [
    "AuditEvent",
    "AuditLogger",
    "NullAuditLogger",
    "MemoryAuditLogger",
    "FileAuditLogger",
    "create_audit_logger",
]
