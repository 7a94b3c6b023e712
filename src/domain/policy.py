from typing import Any

from src.domain.entities import Proposal, UserProfile
from src.rules.models import Rules


class PolicyEngine:
    def __init__(self, rules: Rules):
        self.rules = rules

    def check_permission(
        self,
        user: UserProfile | None,
        action: str,
        resource: Any = None,
        context: dict[str, Any] | None = None,
    ) -> bool:
        """
        Check if the user is allowed to perform the action on the resource.

        Order of precedence:
        1. Public Permissions (Global)
        2. Role-Based Access Control (RBAC)
        3. Attribute-Based Access Control (ABAC)
        """
        context = context or {}

        if action in self.rules.rbac.public_permissions:
            return True

        if not user or not user.is_active:
            return False

        allowed_actions = self.rules.rbac.roles.get(user.role, [])
        if "*" in allowed_actions or action in allowed_actions:
            return True
        # Scoped wildcards: "proposals:*" matches "proposals:review"
        if ":" in action and f"{action.split(':')[0]}:*" in allowed_actions:
            return True

        if resource is not None or "proposed_by" in context:
            for rule in self.rules.abac.proposal_rules:
                if action in rule.allow and self._evaluate_rule(
                    rule.if_condition, user, resource, context
                ):
                    return True

        return False

    def _evaluate_rule(
        self,
        condition: dict[str, Any],
        user: UserProfile,
        resource: Any,
        context: dict[str, Any],
    ) -> bool:
        """
        Evaluate condition predicates from rules.yaml.
        Supported predicates:
        - role_in: list[str]
        - owns_proposal: bool (resource.proposed_by, or context["proposed_by"] for listings)
        """
        for predicate, args in condition.items():
            if predicate == "role_in":
                if user.role not in set(args):
                    return False

            elif predicate == "owns_proposal":
                if args:
                    owner = (
                        resource.proposed_by
                        if isinstance(resource, Proposal)
                        else context.get("proposed_by")
                    )
                    if owner is None or str(owner) != user.id:
                        return False

            else:
                return False

        return True

    def can_review(self, user: UserProfile) -> bool:
        return self.check_permission(user, "proposals:review")
