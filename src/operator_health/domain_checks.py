"""Checks on WebLogic domains and their persistent volumes."""

import logging
from collections import defaultdict
from typing import Iterable

from kubernetes import client

from operator_health.diagnostics import DiagnosticSink, LoggingDiagnosticSink
from operator_health.enums import MessageKey

logger = logging.getLogger(__name__)

DOMAIN_UID_LABEL = "weblogic.domainUID"
READ_WRITE_MANY = "ReadWriteMany"


def verify_domain_uid_uniqueness(
    domains: Iterable[tuple[str, str]], sink: DiagnosticSink = None
) -> list[str]:
    """Warn about domain UIDs used in more than one namespace.

    Args:
        domains: (namespace, domain UID) pairs
        sink: Destination for warnings

    Returns:
        Sorted list of duplicated domain UIDs
    """
    sink = sink or LoggingDiagnosticSink()
    namespaces_by_uid: dict[str, set[str]] = defaultdict(set)
    for namespace, domain_uid in domains:
        namespaces_by_uid[domain_uid].add(namespace)

    duplicated = sorted(uid for uid, namespaces in namespaces_by_uid.items() if len(namespaces) > 1)
    for domain_uid in duplicated:
        sink.warning(MessageKey.DOMAIN_UID_UNIQUENESS_FAILED, domain_uid, sorted(namespaces_by_uid[domain_uid]))
    logger.debug(f"Checked {len(namespaces_by_uid)} domain UIDs, {len(duplicated)} duplicated")
    return duplicated


def volumes_for_domain(domain_uid: str, volumes: Iterable[client.V1PersistentVolume]) -> list[client.V1PersistentVolume]:
    return [
        volume
        for volume in volumes
        if ((volume.metadata and volume.metadata.labels) or {}).get(DOMAIN_UID_LABEL) == domain_uid
    ]


def verify_persistent_volume(
    domain_uid: str, volumes: Iterable[client.V1PersistentVolume], sink: DiagnosticSink = None
) -> bool:
    """Check that a domain has a shareable persistent volume.

    The domain's volume is found by its weblogic.domainUID label and must
    allow ReadWriteMany access, since every server in the domain mounts it.

    Args:
        domain_uid: Domain UID
        volumes: Persistent volumes in the cluster
        sink: Destination for warnings

    Returns:
        True if at least one volume is labeled for the domain and every
        labeled volume allows ReadWriteMany
    """
    sink = sink or LoggingDiagnosticSink()
    matching = volumes_for_domain(domain_uid, volumes)
    if not matching:
        sink.warning(MessageKey.PV_NOT_FOUND_FOR_DOMAIN_UID, domain_uid)
        return False

    ok = True
    for volume in matching:
        access_modes = (volume.spec.access_modes if volume.spec else None) or []
        if READ_WRITE_MANY not in access_modes:
            sink.warning(MessageKey.PV_ACCESS_MODE_FAILED, volume.metadata.name, domain_uid)
            ok = False
    return ok
