"""
Per data-source rules for which query fields must be filled in.
"""

from typing import Callable, Dict, FrozenSet, Optional

from ..common.messages import SourceFamilies
from .types import QueryDescriptor, nonempty


# Family -> concrete data sources (lowercase)
SOURCE_FAMILIES: Dict[str, FrozenSet[str]] = {
    SourceFamilies.SQL: frozenset({'aurora', 'snowflake'}),
    SourceFamilies.S3: frozenset({'s3'}),
    SourceFamilies.DYNAMODB: frozenset({'dynamodb'}),
}

# Family -> predicate over the query payload
FIELD_REQUIREMENTS: Dict[str, Callable[[QueryDescriptor], bool]] = {
    SourceFamilies.SQL: lambda query: nonempty(query.query_sql),
    SourceFamilies.S3: lambda query: nonempty(query.query_sql),
    SourceFamilies.DYNAMODB: lambda query: nonempty(query.key_condition_expression),
}


class SourceRequirementChecker:
    """Checks that a query carries the payload its data source needs."""

    def family_of(self, data_source: Optional[str]) -> Optional[str]:
        """Return the family a data source belongs to, or None if unrecognized."""
        if not nonempty(data_source):
            return None
        source = data_source.lower()
        for family, members in SOURCE_FAMILIES.items():
            if source in members:
                return family
        return None

    def fields_ok(self, query: QueryDescriptor) -> bool:
        """True when the data source is recognized and its required field is present."""
        family = self.family_of(query.data_source)
        if family is None:
            return False
        return FIELD_REQUIREMENTS[family](query)
