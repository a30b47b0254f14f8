"""
Authorization types for DataGuard.
Implements users, roles, grants, access requests and tri-state decisions.

Model types are frozen dataclasses holding tuples, so grants are hashable
and evaluation can never mutate them. Resource-scope fields use ``None`` for
"not specified" (matches anything); a tuple, even an empty one, narrows.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..common.messages import DECISION_MESSAGES
from ..types.errors import ValidationError


class Decision(Enum):
    """Tri-state access decision."""
    ALLOWED = "Allowed"
    DENIED = "Denied"
    INDETERMINATE = "Indeterminate"


# Constants for convenience
Allowed = Decision.ALLOWED
Denied = Decision.DENIED
Indeterminate = Decision.INDETERMINATE


class DecisionReason(str, Enum):
    """The precondition that settled a decision."""
    MISSING_FIELDS = "missing_fields"
    UNKNOWN_USER = "unknown_user"
    UNSUPPORTED_METHOD = "unsupported_method"
    MISSING_DATA_SOURCE = "missing_data_source"
    TYPE_MISMATCH = "type_mismatch"
    INSUFFICIENT_QUERY_FIELDS = "insufficient_query_fields"
    ACCESS_GRANTED = "access_granted"
    INSUFFICIENT_PRIVILEGES = "insufficient_privileges"

    def __str__(self) -> str:
        return self.value


def nonempty(value: Optional[str]) -> bool:
    """True when a value is neither missing nor the empty string."""
    return value is not None and value != ""


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _request_columns(value: Any) -> Optional[Tuple[str, ...]]:
    # A malformed column list must still be checked, never dropped
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return (str(value),)


def _as_tuple(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(value)
    return value


def _optional_strings(data: Dict[str, Any], key: str) -> Optional[Tuple[str, ...]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{key} must be a list of strings", field=key, value=value)
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(f"{key} must contain only strings", field=key, value=item)
    return tuple(value)


@dataclass(frozen=True)
class TableColumns:
    """Column allow-list for one (qualified) table."""
    table: str
    columns: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'columns', _as_tuple(self.columns))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'table': self.table,
            'columns': list(self.columns)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TableColumns':
        """Create from dictionary representation."""
        if not isinstance(data, dict):
            raise ValidationError("columns_by_table entries must be mappings", field='columns_by_table', value=data)
        table = data.get('table')
        if not isinstance(table, str) or not table:
            raise ValidationError("columns_by_table entry needs a table name", field='table', value=table)
        return cls(
            table=table,
            columns=_optional_strings(data, 'columns') or ()
        )


@dataclass(frozen=True)
class GrantResources:
    """
    Resource scope of a grant.

    Attributes:
        data_source: Data source name, or "*"; None means any source
        instances: Glob patterns for instances; None means any instance
        tables: Glob patterns for bare or "instance.table" names; None means any table
        columns_allow: Columns allowed across every table the grant covers
        columns_by_table: Per-table column allow-lists keyed by qualified table name
    """
    data_source: Optional[str] = None
    instances: Optional[Tuple[str, ...]] = None
    tables: Optional[Tuple[str, ...]] = None
    columns_allow: Optional[Tuple[str, ...]] = None
    columns_by_table: Optional[Tuple[TableColumns, ...]] = None

    def __post_init__(self):
        for name in ('instances', 'tables', 'columns_allow', 'columns_by_table'):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation, omitting unspecified fields."""
        result: Dict[str, Any] = {}
        if self.data_source is not None:
            result['data_source'] = self.data_source
        if self.instances is not None:
            result['instances'] = list(self.instances)
        if self.tables is not None:
            result['tables'] = list(self.tables)
        if self.columns_allow is not None:
            result['columns_allow'] = list(self.columns_allow)
        if self.columns_by_table is not None:
            result['columns_by_table'] = [entry.to_dict() for entry in self.columns_by_table]
        return result

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'GrantResources':
        """Create from dictionary representation."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValidationError("resources must be a mapping", field='resources', value=data)

        data_source = data.get('data_source')
        if data_source is not None and not isinstance(data_source, str):
            raise ValidationError("data_source must be a string", field='data_source', value=data_source)

        columns_by_table = None
        raw_by_table = data.get('columns_by_table')
        if raw_by_table is not None:
            if not isinstance(raw_by_table, (list, tuple)):
                raise ValidationError("columns_by_table must be a list", field='columns_by_table', value=raw_by_table)
            columns_by_table = tuple(TableColumns.from_dict(entry) for entry in raw_by_table)

        return cls(
            data_source=data_source,
            instances=_optional_strings(data, 'instances'),
            tables=_optional_strings(data, 'tables'),
            columns_allow=_optional_strings(data, 'columns_allow'),
            columns_by_table=columns_by_table
        )


@dataclass(frozen=True)
class Grant:
    """
    A unit of permission: allowed actions plus an optional resource scope.
    """
    actions: Tuple[str, ...] = ()
    resources: GrantResources = field(default_factory=GrantResources)

    def __post_init__(self):
        object.__setattr__(self, 'actions', _as_tuple(self.actions))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'actions': list(self.actions),
            'resources': self.resources.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Grant':
        """Create from dictionary representation."""
        if not isinstance(data, dict):
            raise ValidationError("grant must be a mapping", field='grant', value=data)
        return cls(
            actions=_optional_strings(data, 'actions') or (),
            resources=GrantResources.from_dict(data.get('resources'))
        )


@dataclass(frozen=True)
class Role:
    """A named bundle of grants."""
    id: str
    grants: Tuple[Grant, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'grants', _as_tuple(self.grants))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {'grants': [grant.to_dict() for grant in self.grants]}

    @classmethod
    def from_dict(cls, role_id: str, data: Dict[str, Any]) -> 'Role':
        """Create from the directory representation ``{"grants": [...]}``."""
        if not isinstance(data, dict):
            raise ValidationError(f"role {role_id} must be a mapping", field='roles', value=role_id)
        grants = data.get('grants') or []
        if not isinstance(grants, (list, tuple)):
            raise ValidationError(f"grants of role {role_id} must be a list", field='grants', value=grants)
        return cls(id=role_id, grants=tuple(Grant.from_dict(grant) for grant in grants))


@dataclass(frozen=True)
class User:
    """A directory user and the role identifiers attached to it."""
    id: str
    roles: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'roles', _as_tuple(self.roles))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {'roles': list(self.roles)}

    @classmethod
    def from_dict(cls, user_id: str, data: Dict[str, Any]) -> 'User':
        """Create from the directory representation ``{"roles": [...]}``."""
        if not isinstance(data, dict):
            raise ValidationError(f"user {user_id} must be a mapping", field='users', value=user_id)
        return cls(id=user_id, roles=_optional_strings(data, 'roles') or ())


@dataclass(frozen=True)
class HttpRequest:
    """The HTTP envelope of an access request."""
    method: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'method': self.method}


@dataclass(frozen=True)
class QueryDescriptor:
    """
    Structured description of the query being authorized.

    ``key_condition_expression`` travels as ``KeyConditionExpression`` on the wire.
    """
    query_type: Optional[str] = None
    data_source: Optional[str] = None
    instance: Optional[str] = None
    table: Optional[str] = None
    query_sql: Optional[str] = None
    key_condition_expression: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation, omitting missing fields."""
        values = {
            'query_type': self.query_type,
            'data_source': self.data_source,
            'instance': self.instance,
            'table': self.table,
            'query_sql': self.query_sql,
            'KeyConditionExpression': self.key_condition_expression,
        }
        return {key: value for key, value in values.items() if value is not None}

    @classmethod
    def from_dict(cls, data: Any) -> 'QueryDescriptor':
        """Create from dictionary representation; malformed fields read as missing."""
        data = _mapping(data)
        return cls(
            query_type=_text(data.get('query_type')),
            data_source=_text(data.get('data_source')),
            instance=_text(data.get('instance')),
            table=_text(data.get('table')),
            query_sql=_text(data.get('query_sql')),
            key_condition_expression=_text(data.get('KeyConditionExpression'))
        )


@dataclass(frozen=True)
class AccessRequest:
    """
    Request to run a query against a data source on behalf of a user.

    Attributes:
        user_id: Caller identity
        request: HTTP envelope (method)
        query: Query description
        columns: Columns the caller intends to read or write; None when not declared
    """
    user_id: Optional[str] = None
    request: HttpRequest = field(default_factory=HttpRequest)
    query: QueryDescriptor = field(default_factory=QueryDescriptor)
    columns: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        object.__setattr__(self, 'columns', _as_tuple(self.columns))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        result: Dict[str, Any] = {
            'user_id': self.user_id,
            'request': self.request.to_dict(),
            'query': self.query.to_dict()
        }
        if self.columns is not None:
            result['columns'] = list(self.columns)
        return result

    @classmethod
    def from_dict(cls, data: Any) -> 'AccessRequest':
        """
        Create from dictionary representation.

        Never raises: anything malformed is read as missing so that the
        engine can still reach a decision. Columns come from the outer
        envelope, falling back to ``query.columns``.
        """
        data = _mapping(data)
        query = _mapping(data.get('query'))
        columns = data.get('columns')
        if columns is None:
            columns = query.get('columns')
        return cls(
            user_id=_text(data.get('user_id')),
            request=HttpRequest(method=_text(_mapping(data.get('request')).get('method'))),
            query=QueryDescriptor.from_dict(query),
            columns=_request_columns(columns)
        )


@dataclass(frozen=True)
class ValidationResult:
    """
    Structural validation of an access request.

    Attributes:
        complete: user_id, request.method and query.query_type are all present
        action: Canonical action mapped from the HTTP method; None if unsupported
        type_matches: The mapped action equals the declared query type
    """
    complete: bool
    action: Optional[str] = None
    type_matches: bool = False

    @property
    def supported(self) -> bool:
        return self.action is not None


@dataclass(frozen=True)
class DecisionResult:
    """
    Outcome of evaluating an access request.
    """
    decision: Decision
    reason: DecisionReason
    message: str
    annotations: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    @property
    def allowed(self) -> bool:
        return self.decision is Decision.ALLOWED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the output contract ``{"Decision": ..., "Message": ...}``."""
        return {
            'Decision': self.decision.value,
            'Message': self.message
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DecisionResult':
        """Create from the output contract; the reason is recovered from the message."""
        data = _mapping(data)
        message = data.get('Message')
        reasons: List[DecisionReason] = [
            reason for reason in DecisionReason
            if getattr(DECISION_MESSAGES, reason.value) == message
        ]
        if not reasons:
            raise ValidationError("unknown decision message", field='Message', value=message)
        try:
            decision = Decision(data.get('Decision'))
        except ValueError:
            raise ValidationError("unknown decision", field='Decision', value=data.get('Decision'))
        return cls(
            decision=decision,
            reason=reasons[0],
            message=message
        )
