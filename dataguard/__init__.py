"""
DataGuard Python Package

Authorization decision engine for data-access requests
"""

__version__ = "0.1.0"

from .core.guard import DataGuard
from .core.config import Config
from .authz import (
    AccessRequest,
    Decision,
    DecisionEngine,
    DecisionResult,
    Grant,
    RoleDirectory,
    decide,
)

__all__ = [
    "DataGuard",
    "Config",
    "AccessRequest",
    "Decision",
    "DecisionEngine",
    "DecisionResult",
    "Grant",
    "RoleDirectory",
    "decide",
]
