# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package authz implements the access decision procedure for data-access requests.

Components:
  - RoleDirectory:             users -> roles -> grants
  - GlobMatcher:               anchored, case-insensitive ``*``/``?`` patterns
  - RequestValidator:          completeness, method mapping, type alignment
  - SourceRequirementChecker:  per data-source required query fields
  - ResourceMatcher:           data source / instance / table scope
  - ColumnConstraintEvaluator: global and per-table column allow-lists
  - DecisionEngine:            the ordered guard chain producing the decision
"""

from .types import (
    Decision,
    DecisionReason,
    DecisionResult,
    Grant,
    GrantResources,
    TableColumns,
    Role,
    User,
    HttpRequest,
    QueryDescriptor,
    AccessRequest,
    ValidationResult,
    Allowed,
    Denied,
    Indeterminate,
)

from .glob import GlobMatcher, compile_glob
from .validator import RequestValidator, METHOD_ACTIONS
from .sources import SourceRequirementChecker, SOURCE_FAMILIES
from .resources import ResourceMatcher, qualified_table_name
from .columns import ColumnConstraintEvaluator
from .directory import RoleDirectory
from .engine import DecisionEngine, decide

__all__ = [
    # Types
    'Decision',
    'DecisionReason',
    'DecisionResult',
    'Grant',
    'GrantResources',
    'TableColumns',
    'Role',
    'User',
    'HttpRequest',
    'QueryDescriptor',
    'AccessRequest',
    'ValidationResult',
    'Allowed',
    'Denied',
    'Indeterminate',

    # Components
    'GlobMatcher',
    'compile_glob',
    'RequestValidator',
    'METHOD_ACTIONS',
    'SourceRequirementChecker',
    'SOURCE_FAMILIES',
    'ResourceMatcher',
    'qualified_table_name',
    'ColumnConstraintEvaluator',
    'RoleDirectory',

    # Engine
    'DecisionEngine',
    'decide',
]
