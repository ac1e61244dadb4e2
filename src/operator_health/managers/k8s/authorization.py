"""Permission queries against the Kubernetes authorization API."""

import logging
from typing import Optional

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from operator_health.enums import KubeVerb, Scope
from operator_health.errors import PermissionQueryFailed
from operator_health.managers.base import AccessReviewer
from operator_health.models import GrantedRule

logger = logging.getLogger(__name__)


class AuthorizationManager(AccessReviewer):
    """Answers permission queries with self-subject reviews.

    Rules reviews always need a namespace. Cluster-scoped rules are read from a
    review of the operator's own namespace, which includes every rule granted
    through cluster role bindings.
    """

    def __init__(self, auth_v1_api: client.AuthorizationV1Api, operator_namespace: str):
        """Initialize the AuthorizationManager.

        Args:
            auth_v1_api: Kubernetes authorization API client
            operator_namespace: Namespace the operator runs in
        """
        self.auth_v1_api = auth_v1_api
        self.operator_namespace = operator_namespace

    def can_i(
        self,
        namespace: Optional[str],
        resource: str,
        subresource: str,
        api_group: str,
        verb: KubeVerb,
    ) -> bool:
        review = client.V1SelfSubjectAccessReview(
            spec=client.V1SelfSubjectAccessReviewSpec(
                resource_attributes=client.V1ResourceAttributes(
                    namespace=namespace,
                    verb=verb.value,
                    resource=resource,
                    subresource=subresource or None,
                    group=api_group,
                )
            )
        )

        try:
            result = self.auth_v1_api.create_self_subject_access_review(body=review)
        except ApiException as e:
            logger.error(f"Access review for {verb} {resource} in {namespace or 'cluster'} failed: {e}")
            raise PermissionQueryFailed(
                f"Access review for {verb} {resource} failed: {e.reason}", namespace=namespace, status=e.status
            ) from e
        except (HTTPError, OSError) as e:
            logger.error(f"Access review for {verb} {resource} in {namespace or 'cluster'} failed: {e}")
            raise PermissionQueryFailed(
                f"Access review for {verb} {resource} failed: {e}", namespace=namespace
            ) from e

        allowed = bool(result.status and result.status.allowed)
        logger.debug(
            f"Access review: {verb} {resource}/{subresource} (group '{api_group}') "
            f"in {namespace or 'cluster'} -> {'allowed' if allowed else 'denied'}"
        )
        return allowed

    def list_rules(self, namespace: Optional[str]) -> list[GrantedRule]:
        scope = Scope.of(namespace)
        review = client.V1SelfSubjectRulesReview(
            spec=client.V1SelfSubjectRulesReviewSpec(namespace=namespace or self.operator_namespace)
        )

        try:
            result = self.auth_v1_api.create_self_subject_rules_review(body=review)
        except ApiException as e:
            logger.error(f"Rules review for {namespace or 'cluster'} failed: {e}")
            raise PermissionQueryFailed(
                f"Rules review for {namespace or 'cluster'} failed: {e.reason}", namespace=namespace, status=e.status
            ) from e
        except (HTTPError, OSError) as e:
            logger.error(f"Rules review for {namespace or 'cluster'} failed: {e}")
            raise PermissionQueryFailed(
                f"Rules review for {namespace or 'cluster'} failed: {e}", namespace=namespace
            ) from e

        status = result.status
        if status is not None and status.incomplete:
            logger.warning(
                f"Rules review for {namespace or 'cluster'} is incomplete: {status.evaluation_error}"
            )
        resource_rules = (status.resource_rules if status else None) or []
        # rules limited to named objects never cover a requirement on the whole resource
        named = [rule for rule in resource_rules if rule.resource_names]
        if named:
            logger.debug(f"Ignoring {len(named)} rules restricted to named resources in {namespace or 'cluster'}")
        return [self.to_granted_rule(rule, scope) for rule in resource_rules if not rule.resource_names]

    @staticmethod
    def to_granted_rule(rule: client.V1ResourceRule, scope: Scope) -> GrantedRule:
        """Convert a V1ResourceRule into a GrantedRule.

        Args:
            rule: Rule from a SelfSubjectRulesReview status
            scope: Scope of the review that returned the rule

        Returns:
            GrantedRule
        """
        return GrantedRule(
            api_groups=rule.api_groups or [],
            resources=rule.resources or [],
            verbs=rule.verbs or [],
            scope=scope,
        )
