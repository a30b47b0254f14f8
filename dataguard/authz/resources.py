"""
Matching a grant's resource scope (data source, instance, table) against a query.
"""

from typing import Optional

from .glob import GlobMatcher
from .types import Grant, QueryDescriptor, nonempty


def qualified_table_name(instance: Optional[str], table: Optional[str]) -> str:
    """
    Compose the qualified table name.

    Returns ``instance.table`` when an instance is given, else just the table,
    both lowercased.
    """
    table_name = (table or '').lower()
    if nonempty(instance):
        return f"{instance.lower()}.{table_name}"
    return table_name


class ResourceMatcher:
    """
    Decides whether a grant's resource scope covers a query.

    Each dimension is optional on the grant; an omitted dimension matches
    anything.
    """

    def __init__(self, glob: Optional[GlobMatcher] = None):
        self.glob = glob or GlobMatcher()

    def data_source_matches(self, grant: Grant, query: QueryDescriptor) -> bool:
        data_source = grant.resources.data_source
        if data_source is None or data_source == '*':
            return True
        return nonempty(query.data_source) and data_source.lower() == query.data_source.lower()

    def instance_matches(self, grant: Grant, query: QueryDescriptor) -> bool:
        instances = grant.resources.instances
        if instances is None:
            return True
        if not nonempty(query.instance):
            return False
        return self.glob.matches_any(instances, query.instance)

    def table_matches(self, grant: Grant, query: QueryDescriptor) -> bool:
        tables = grant.resources.tables
        if tables is None:
            return True
        if not nonempty(query.table):
            return False
        return self.glob.matches_any(
            tables,
            query.table,
            qualified_table_name(query.instance, query.table)
        )

    def matches(self, grant: Grant, query: QueryDescriptor) -> bool:
        """True when data source, instance and table checks all pass."""
        return (
            self.data_source_matches(grant, query)
            and self.instance_matches(grant, query)
            and self.table_matches(grant, query)
        )
