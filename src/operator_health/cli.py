#!/usr/bin/env python3
"""
Operator Health Check

Verifies, against the current Kubernetes context, that the operator's service
account holds every permission it needs in its target namespaces and at
cluster scope, then checks domain UID uniqueness and domain persistent volumes.

Exit status is 0 when healthy, 1 when a check failed and 2 when the checks
could not be run.
"""

import argparse
import logging
import sys

from kubernetes.client.rest import ApiException
from kubernetes.config import ConfigException
from urllib3.exceptions import HTTPError

from operator_health.config import Config
from operator_health.diagnostics import LoggingDiagnosticSink
from operator_health.errors import HealthCheckError
from operator_health.health_check import HealthCheckHelper
from operator_health.managers.k8s import AuthorizationManager, ClusterInfoManager
from operator_health.matrix import load_access_matrix
from operator_health.models import HealthReport, KubernetesVersion
from operator_health.utils.client import ClientManager

logger = logging.getLogger(__name__)

EXIT_HEALTHY = 0
EXIT_UNHEALTHY = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="operator-health-check",
        description="Verify operator permissions and domain prerequisites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  OPERATOR_NAMESPACE, TARGET_NAMESPACES, ACCESS_MATRIX_FILE, RULES_REVIEW_VERSION,
  ISOLATE_NAMESPACE_FAILURES, KUBE_CONTEXT, DOMAIN_VERSION and LOG_LEVEL provide
  defaults for the options below.

Examples:
  operator-health-check --namespaces ns1,ns2
  operator-health-check --kubernetes-version 1.7 --skip-domain-checks
        """,
    )
    parser.add_argument("--operator-namespace", default=Config.OPERATOR_NAMESPACE,
                        help=f"Namespace the operator runs in (default: {Config.OPERATOR_NAMESPACE})")
    parser.add_argument("--namespaces", default=",".join(Config.TARGET_NAMESPACES),
                        help="Comma separated target namespaces")
    parser.add_argument("--access-matrix", default=Config.ACCESS_MATRIX_FILE or None,
                        help="YAML access matrix (default: packaged matrix)")
    parser.add_argument("--rules-review-version", default=Config.RULES_REVIEW_VERSION,
                        help=f"Minimum version using rules reviews (default: {Config.RULES_REVIEW_VERSION})")
    parser.add_argument("--kubernetes-version",
                        help="Assume this server version instead of asking the API server")
    parser.add_argument("--isolate-namespace-failures", action=argparse.BooleanOptionalAction,
                        default=Config.ISOLATE_NAMESPACE_FAILURES,
                        help="Skip namespaces with missing permissions instead of failing")
    parser.add_argument("--context", default=Config.KUBE_CONTEXT or None,
                        help="kubeconfig context (default: current context)")
    parser.add_argument("--domain-version", default=Config.DOMAIN_VERSION,
                        help=f"Domain custom resource version (default: {Config.DOMAIN_VERSION})")
    parser.add_argument("--skip-domain-checks", action="store_true",
                        help="Only verify permissions")
    parser.add_argument("--log-level", default=Config.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help=f"Log level (default: {Config.LOG_LEVEL})")
    return parser


def print_summary(report: HealthReport, domains_ok: bool = True) -> None:
    print("\n" + "=" * 60)
    print(f"Review strategy: {report.strategy}")
    print(f"Cluster access: {'OK' if report.cluster_healthy else 'DENIED'}")
    for namespace, result in report.namespaces.items():
        status = "OK" if result.healthy else f"{len(result.denials)} denied"
        print(f"Namespace {namespace}: {status}")
    for denial in report.denials:
        print(f"  - {denial.requirement}")
    if not domains_ok:
        print("Domain checks: FAILED")
    print(f"Overall: {'HEALTHY' if report.healthy and domains_ok else 'UNHEALTHY'}")
    print("=" * 60)


def main(argv: list[str] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    target_namespaces = [ns.strip() for ns in args.namespaces.split(",") if ns.strip()]
    if not target_namespaces:
        logger.error("No target namespaces given")
        return EXIT_ERROR

    try:
        matrix = load_access_matrix(args.access_matrix)
        threshold = KubernetesVersion.parse(args.rules_review_version)
        clients = ClientManager.create_k8s_clients(args.context)
        cluster = ClusterInfoManager(
            clients.version_api, clients.core_v1_api, clients.custom_objects_api, args.domain_version
        )
        version = (
            KubernetesVersion.parse(args.kubernetes_version) if args.kubernetes_version else cluster.get_version()
        )

        helper = HealthCheckHelper(
            AuthorizationManager(clients.auth_v1_api, args.operator_namespace),
            matrix=matrix,
            sink=LoggingDiagnosticSink(),
            rules_review_version=threshold,
            isolate_namespace_failures=args.isolate_namespace_failures,
        )
        report = helper.perform_security_checks(version, args.operator_namespace, target_namespaces)

        domains_ok = True
        if not args.skip_domain_checks:
            domains_ok = helper.perform_domain_checks(cluster.list_domains(), cluster.list_persistent_volumes())
    except (HealthCheckError, ConfigException, ApiException, HTTPError) as e:
        logger.error(f"Health check could not be completed: {e}")
        return EXIT_ERROR

    print_summary(report, domains_ok)
    return EXIT_HEALTHY if report.healthy and domains_ok else EXIT_UNHEALTHY


if __name__ == "__main__":
    sys.exit(main())
