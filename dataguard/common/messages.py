# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Common constants and messages for DataGuard.

Decision messages are part of the output contract and end up in audit logs,
so each reachable decision state has exactly one fixed message.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class DecisionMessages:
    """Messages attached to access decisions, one per decision state."""
    missing_fields: str = "missing required fields"
    unknown_user: str = "user does not exist"
    unsupported_method: str = "unsupported request method"
    missing_data_source: str = "missing data source"
    type_mismatch: str = "type mismatch between request method and query type"
    insufficient_query_fields: str = "insufficient query fields for data source"
    access_granted: str = "access granted"
    insufficient_privileges: str = "insufficient privileges"


# Global instance
DECISION_MESSAGES = DecisionMessages()


class Actions:
    """Canonical data actions."""
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ANY = "*"


class SourceFamilies:
    """Data-source families sharing required-field rules."""
    SQL = "sql"
    S3 = "s3"
    DYNAMODB = "dynamodb"


class EventTypes:
    """Audit event types."""
    ACCESS_DECISION = "access_decision"
    DIRECTORY_LOADED = "directory_loaded"
