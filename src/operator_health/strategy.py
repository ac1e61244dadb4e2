"""Selection and execution of the access review strategy.

API servers from 1.8 on support SelfSubjectRulesReview, which returns all
rules for a namespace in one call. Older servers are asked about each
permission individually.
"""

import logging
from abc import ABC, abstractmethod
from itertools import groupby
from typing import Iterable, Optional

from operator_health.enums import ReviewStrategy
from operator_health.managers.base import AccessReviewer
from operator_health.models import AccessRequirement, KubernetesVersion, VerificationResult
from operator_health.reconciler import AccessReconciler, ordered

logger = logging.getLogger(__name__)

RULES_REVIEW_VERSION = KubernetesVersion(1, 8)


def select_strategy(
    version: KubernetesVersion, threshold: KubernetesVersion = RULES_REVIEW_VERSION
) -> ReviewStrategy:
    """Choose how to verify access for a server version.

    Args:
        version: API server version
        threshold: Minimum version supporting rules reviews

    Returns:
        BULK_RULES_REVIEW if version >= threshold, PER_CHECK_REVIEW otherwise
    """
    strategy = ReviewStrategy.BULK_RULES_REVIEW if version >= threshold else ReviewStrategy.PER_CHECK_REVIEW
    logger.debug(f"Kubernetes {version} (rules review from {threshold}): using {strategy} strategy")
    return strategy


class AccessReview(ABC):
    """Verifies a set of requirements with one review strategy."""

    strategy: ReviewStrategy

    def __init__(self, reviewer: AccessReviewer, reconciler: AccessReconciler):
        self.reviewer = reviewer
        self.reconciler = reconciler

    @abstractmethod
    def review(self, requirements: Iterable[AccessRequirement]) -> VerificationResult:
        """Verify requirements.

        Args:
            requirements: Requirements to verify

        Returns:
            VerificationResult

        Raises:
            PermissionQueryFailed: If a query to the reviewer fails
        """
        pass


class PerCheckReview(AccessReview):
    """One access review per requirement."""

    strategy = ReviewStrategy.PER_CHECK_REVIEW

    def review(self, requirements: Iterable[AccessRequirement]) -> VerificationResult:
        decisions = {}
        for requirement in ordered(requirements):
            descriptor = requirement.resource
            decisions[requirement] = self.reviewer.can_i(
                requirement.namespace,
                descriptor.resource,
                descriptor.subresource,
                descriptor.api_group,
                requirement.verb,
            )
        logger.debug(f"Issued {len(decisions)} access reviews")
        return self.reconciler.verify_decisions(decisions)


class BulkRulesReview(AccessReview):
    """One rules review per scope, matched locally against each requirement."""

    strategy = ReviewStrategy.BULK_RULES_REVIEW

    def review(self, requirements: Iterable[AccessRequirement]) -> VerificationResult:
        result = VerificationResult()
        for namespace, group in groupby(ordered(requirements), key=_namespace_of):
            grants = self.reviewer.list_rules(namespace)
            logger.debug(f"Rules review for {namespace or 'cluster'} returned {len(grants)} rules")
            result = result.merge(self.reconciler.verify(group, grants))
        return result


def _namespace_of(requirement: AccessRequirement) -> Optional[str]:
    return requirement.namespace


def create_review(
    strategy: ReviewStrategy, reviewer: AccessReviewer, reconciler: AccessReconciler
) -> AccessReview:
    """Instantiate the AccessReview implementing a strategy."""
    reviews = {
        ReviewStrategy.PER_CHECK_REVIEW: PerCheckReview,
        ReviewStrategy.BULK_RULES_REVIEW: BulkRulesReview,
    }
    return reviews[strategy](reviewer, reconciler)
