"""Operator startup health checks."""

import logging
from typing import Iterable, Optional

from kubernetes import client

from operator_health.diagnostics import DiagnosticSink, LoggingDiagnosticSink
from operator_health.domain_checks import verify_domain_uid_uniqueness, verify_persistent_volume
from operator_health.managers.base import AccessReviewer
from operator_health.matrix import (
    AccessMatrix,
    build_cluster_requirements,
    build_namespace_requirements,
    default_access_matrix,
)
from operator_health.models import HealthReport, KubernetesVersion, VerificationResult
from operator_health.reconciler import AccessReconciler
from operator_health.strategy import RULES_REVIEW_VERSION, AccessReview, create_review, select_strategy

logger = logging.getLogger(__name__)


class HealthCheckHelper:
    """Verifies that the operator holds every permission it needs.

    Each target namespace is checked in the order given, then the cluster
    scope is checked once. Denials are reported through the diagnostic sink
    and collected into a HealthReport.
    """

    def __init__(
        self,
        reviewer: AccessReviewer,
        matrix: Optional[AccessMatrix] = None,
        sink: Optional[DiagnosticSink] = None,
        rules_review_version: KubernetesVersion = RULES_REVIEW_VERSION,
        isolate_namespace_failures: bool = False,
    ):
        """Initialize the HealthCheckHelper.

        Args:
            reviewer: Collaborator answering permission queries
            matrix: Required permissions; the packaged matrix when None
            sink: Destination for warnings; a LoggingDiagnosticSink when None
            rules_review_version: Minimum server version for rules reviews
            isolate_namespace_failures: When True, a namespace with denials is
                reported as skipped and does not fail the report
        """
        self.reviewer = reviewer
        self.matrix = matrix if matrix is not None else default_access_matrix()
        self.sink = sink or LoggingDiagnosticSink()
        self.rules_review_version = rules_review_version
        self.isolate_namespace_failures = isolate_namespace_failures
        self.reconciler = AccessReconciler(self.sink)

    def create_review(self, version: KubernetesVersion) -> AccessReview:
        strategy = select_strategy(version, self.rules_review_version)
        return create_review(strategy, self.reviewer, self.reconciler)

    def verify_namespace(self, version: KubernetesVersion, namespace: str) -> VerificationResult:
        """Verify access inside one target namespace.

        Args:
            version: API server version
            namespace: Target namespace

        Returns:
            VerificationResult for the namespace's requirements
        """
        requirements = build_namespace_requirements(namespace, self.matrix)
        logger.debug(f"Verifying {len(requirements)} access requirements in namespace '{namespace}'")
        return self.create_review(version).review(requirements)

    def verify_cluster(self, version: KubernetesVersion) -> VerificationResult:
        requirements = build_cluster_requirements(self.matrix)
        logger.debug(f"Verifying {len(requirements)} cluster access requirements")
        return self.create_review(version).review(requirements)

    def perform_security_checks(
        self,
        version: KubernetesVersion,
        operator_namespace: str,
        target_namespaces: Iterable[str],
    ) -> HealthReport:
        """Verify namespace and cluster access for the operator.

        Args:
            version: API server version, selects the review strategy
            operator_namespace: Namespace the operator runs in
            target_namespaces: Namespaces the operator manages

        Returns:
            HealthReport with a result per namespace and for the cluster

        Raises:
            PermissionQueryFailed: If the API server cannot answer a query
        """
        strategy = select_strategy(version, self.rules_review_version)
        target_namespaces = list(target_namespaces)
        logger.info(
            f"Performing security checks for operator in '{operator_namespace}' on Kubernetes {version} "
            f"({strategy}), target namespaces: {target_namespaces}"
        )

        report = HealthReport(strategy=strategy, isolate_namespace_failures=self.isolate_namespace_failures)
        for namespace in target_namespaces:
            report.namespaces[namespace] = self.verify_namespace(version, namespace)
        report.cluster = self.verify_cluster(version)

        if report.healthy:
            logger.info(f"Security checks passed for namespaces {report.usable_namespaces}")
        else:
            logger.warning(f"Security checks failed with {len(report.denials)} denied permissions")
        if report.skipped_namespaces and self.isolate_namespace_failures:
            logger.warning(f"Skipping namespaces with missing permissions: {report.skipped_namespaces}")
        return report

    def perform_domain_checks(
        self, domains: Iterable[tuple[str, str]], volumes: Iterable[client.V1PersistentVolume]
    ) -> bool:
        """Check domain UID uniqueness and each domain's persistent volume.

        Args:
            domains: (namespace, domain UID) pairs
            volumes: Persistent volumes in the cluster

        Returns:
            True if no problem was found
        """
        domains = list(domains)
        volumes = list(volumes)
        logger.info(f"Performing domain checks for {len(domains)} domains and {len(volumes)} persistent volumes")

        ok = not verify_domain_uid_uniqueness(domains, self.sink)
        for domain_uid in sorted({uid for _, uid in domains}):
            ok = verify_persistent_volume(domain_uid, volumes, self.sink) and ok
        return ok
