"""
Structural validation of access requests.
"""

from typing import Dict, Optional

from ..common.messages import Actions
from .types import AccessRequest, ValidationResult, nonempty


# HTTP verb -> canonical data action. New verbs only need an entry here.
METHOD_ACTIONS: Dict[str, str] = {
    'GET': Actions.SELECT,
    'POST': Actions.INSERT,
    'PUT': Actions.UPDATE,
    'DELETE': Actions.DELETE,
}


class RequestValidator:
    """
    Checks that a request is complete, that its method is supported and that
    the declared query type agrees with the method.
    """

    def __init__(self, method_actions: Optional[Dict[str, str]] = None):
        mapping = METHOD_ACTIONS if method_actions is None else method_actions
        self.method_actions = {verb.upper(): action.upper() for verb, action in mapping.items()}

    def map_method(self, method: Optional[str]) -> Optional[str]:
        """Map an HTTP verb to its canonical action, or None if unsupported."""
        if not nonempty(method):
            return None
        return self.method_actions.get(method.upper())

    def is_complete(self, request: AccessRequest) -> bool:
        """True when user_id, request.method and query.query_type are all present."""
        return (
            nonempty(request.user_id)
            and nonempty(request.request.method)
            and nonempty(request.query.query_type)
        )

    def validate(self, request: AccessRequest) -> ValidationResult:
        """
        Validate a request.

        Args:
            request: The access request to validate

        Returns:
            ValidationResult: completeness, mapped action and type alignment
        """
        action = self.map_method(request.request.method)
        query_type = request.query.query_type
        type_matches = (
            action is not None
            and nonempty(query_type)
            and action == query_type.upper()
        )
        return ValidationResult(
            complete=self.is_complete(request),
            action=action,
            type_matches=type_matches
        )
