"""
Column allow-list enforcement.
"""

from typing import Iterable, Optional, Set

from .resources import qualified_table_name
from .types import AccessRequest, Grant, QueryDescriptor, TableColumns


def _lowered(columns: Iterable[str]) -> Set[str]:
    return {column.lower() for column in columns}


class ColumnConstraintEvaluator:
    """
    Evaluates a grant's global and per-table column allow-lists.

    Column checks are opt-in on the caller side: a request that declares no
    columns satisfies every grant.
    """

    def global_ok(self, requested: Set[str], grant: Grant) -> bool:
        allowed = grant.resources.columns_allow
        if allowed is None:
            return True
        return requested <= _lowered(allowed)

    def table_entry(self, grant: Grant, query: QueryDescriptor) -> Optional[TableColumns]:
        """Return the per-table entry for the query's qualified table, if any."""
        by_table = grant.resources.columns_by_table
        if not by_table:
            return None
        table = qualified_table_name(query.instance, query.table)
        for entry in by_table:
            if entry.table.lower() == table:
                return entry
        return None

    def per_table_ok(self, requested: Set[str], grant: Grant, query: QueryDescriptor) -> bool:
        entry = self.table_entry(grant, query)
        if entry is None:
            return True
        return requested <= _lowered(entry.columns)

    def columns_ok(self, request: AccessRequest, grant: Grant, query: QueryDescriptor) -> bool:
        """True when every requested column is permitted by the grant."""
        if request.columns is None:
            return True
        requested = _lowered(request.columns)
        return self.global_ok(requested, grant) and self.per_table_ok(requested, grant, query)
