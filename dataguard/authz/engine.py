"""
Decision engine for data-access requests.

Evaluation is an ordered guard chain. Each precondition is checked in
precedence order and the first one that fails settles the decision, so
exactly one outcome is reachable for any input:

1. missing structural fields      -> Indeterminate
2. unknown user                   -> Indeterminate
3. unsupported HTTP method        -> Indeterminate
4. missing data source            -> Indeterminate
5. method/query type mismatch     -> Denied
6. insufficient source fields     -> Indeterminate
7. a grant covers the request     -> Allowed, otherwise Denied
"""

from typing import Any, Dict, List, Optional, Union
import logging

from ..common.messages import Actions, DECISION_MESSAGES, DecisionMessages
from .columns import ColumnConstraintEvaluator
from .directory import RoleDirectory
from .resources import ResourceMatcher
from .sources import SourceRequirementChecker
from .types import (
    AccessRequest, Decision, DecisionReason, DecisionResult, Grant,
    ValidationResult, nonempty
)
from .validator import RequestValidator


logger = logging.getLogger(__name__)


REASON_DECISIONS: Dict[DecisionReason, Decision] = {
    DecisionReason.MISSING_FIELDS: Decision.INDETERMINATE,
    DecisionReason.UNKNOWN_USER: Decision.INDETERMINATE,
    DecisionReason.UNSUPPORTED_METHOD: Decision.INDETERMINATE,
    DecisionReason.MISSING_DATA_SOURCE: Decision.INDETERMINATE,
    DecisionReason.TYPE_MISMATCH: Decision.DENIED,
    DecisionReason.INSUFFICIENT_QUERY_FIELDS: Decision.INDETERMINATE,
    DecisionReason.ACCESS_GRANTED: Decision.ALLOWED,
    DecisionReason.INSUFFICIENT_PRIVILEGES: Decision.DENIED,
}


class DecisionEngine:
    """
    Combines request validation, source requirements, role resolution,
    resource matching and column constraints into a tri-state decision.

    The engine holds no per-request state. The directory snapshot is passed
    to every call, so one engine can serve any number of concurrent
    evaluations and directory reloads.

    Example:
        engine = DecisionEngine()
        result = engine.evaluate_dict({
            "user_id": "alice",
            "request": {"method": "GET"},
            "query": {"query_type": "SELECT", "data_source": "aurora",
                      "query_sql": "select 1"},
        }, directory)
        result.to_dict()  # {"Decision": "Allowed", "Message": "access granted"}
    """

    def __init__(self,
                 validator: Optional[RequestValidator] = None,
                 sources: Optional[SourceRequirementChecker] = None,
                 resources: Optional[ResourceMatcher] = None,
                 columns: Optional[ColumnConstraintEvaluator] = None,
                 messages: DecisionMessages = DECISION_MESSAGES):
        self.validator = validator or RequestValidator()
        self.sources = sources or SourceRequirementChecker()
        self.resources = resources or ResourceMatcher()
        self.columns = columns or ColumnConstraintEvaluator()
        self.messages = messages

    def failed_preconditions(self, request: AccessRequest, directory: RoleDirectory,
                             validation: Optional[ValidationResult] = None) -> List[DecisionReason]:
        """
        Return every failing precondition, in precedence order.

        Only the first entry decides; the rest are diagnostics.
        """
        if validation is None:
            validation = self.validator.validate(request)
        checks = (
            (DecisionReason.MISSING_FIELDS, not validation.complete),
            (DecisionReason.UNKNOWN_USER, not directory.has_user(request.user_id)),
            (DecisionReason.UNSUPPORTED_METHOD, not validation.supported),
            (DecisionReason.MISSING_DATA_SOURCE, not nonempty(request.query.data_source)),
            (DecisionReason.TYPE_MISMATCH, not validation.type_matches),
            (DecisionReason.INSUFFICIENT_QUERY_FIELDS, not self.sources.fields_ok(request.query)),
        )
        return [reason for reason, failed in checks if failed]

    def allows_action(self, grant: Grant, action: str) -> bool:
        return any(
            granted == Actions.ANY or granted.upper() == action.upper()
            for granted in grant.actions
        )

    def authorizes(self, grant: Grant, request: AccessRequest, action: str) -> bool:
        """True when a single grant covers the action, resources and columns of a request."""
        return (
            self.allows_action(grant, action)
            and self.resources.matches(grant, request.query)
            and self.columns.columns_ok(request, grant, request.query)
        )

    def evaluate(self, request: AccessRequest, directory: RoleDirectory) -> DecisionResult:
        """
        Evaluate an access request against a directory snapshot.

        Args:
            request: The access request to evaluate
            directory: Snapshot of users, roles and grants

        Returns:
            DecisionResult: exactly one of Allowed, Denied or Indeterminate
        """
        validation = self.validator.validate(request)
        annotations = {}
        if validation.action:
            annotations['action'] = validation.action

        failed = self.failed_preconditions(request, directory, validation)
        if failed:
            return self._result(request, failed[0], annotations)

        grants = directory.grants_for(request.user_id)
        if any(self.authorizes(grant, request, validation.action) for grant in grants):
            return self._result(request, DecisionReason.ACCESS_GRANTED, annotations)
        return self._result(request, DecisionReason.INSUFFICIENT_PRIVILEGES, annotations)

    def evaluate_dict(self, data: Any, directory: RoleDirectory) -> DecisionResult:
        """Evaluate a request given in its dictionary form."""
        return self.evaluate(AccessRequest.from_dict(data), directory)

    def _result(self, request: AccessRequest, reason: DecisionReason,
                annotations: Dict[str, str]) -> DecisionResult:
        decision = REASON_DECISIONS[reason]
        logger.debug(
            f"Decision for user {request.user_id!r} on {request.query.data_source!r}: "
            f"{decision.value} ({reason})"
        )
        return DecisionResult(
            decision=decision,
            reason=reason,
            message=getattr(self.messages, reason.value),
            annotations=annotations
        )


_default_engine = DecisionEngine()


def decide(request: Union[AccessRequest, Dict[str, Any]], directory: RoleDirectory) -> DecisionResult:
    """Evaluate a request (object or dictionary form) with the default engine."""
    if isinstance(request, AccessRequest):
        return _default_engine.evaluate(request, directory)
    return _default_engine.evaluate_dict(request, directory)
