"""Cluster information needed by the health checks."""

import logging

from kubernetes import client
from kubernetes.client.rest import ApiException

from operator_health.models import KubernetesVersion

logger = logging.getLogger(__name__)

DOMAIN_GROUP = "weblogic.oracle"
DOMAIN_PLURAL = "domains"


class ClusterInfoManager:
    """Manager for reading cluster version, persistent volumes and domains."""

    def __init__(
        self,
        version_api: client.VersionApi,
        core_v1_api: client.CoreV1Api,
        custom_objects_api: client.CustomObjectsApi,
        domain_version: str = "v2",
    ):
        """Initialize ClusterInfoManager.

        Args:
            version_api: Kubernetes version API client
            core_v1_api: Kubernetes CoreV1 API client
            custom_objects_api: Kubernetes custom objects API client
            domain_version: Version of the domain custom resource
        """
        self.version_api = version_api
        self.core_v1_api = core_v1_api
        self.custom_objects_api = custom_objects_api
        self.domain_version = domain_version

    def get_version(self) -> KubernetesVersion:
        """Get the API server version.

        Raises:
            ApiException: If the version endpoint cannot be read
        """
        info = self.version_api.get_code()
        version = KubernetesVersion.from_version_info(info)
        logger.info(f"Kubernetes server version {version} ({info.git_version})")
        return version

    def list_persistent_volumes(self) -> list[client.V1PersistentVolume]:
        return self.core_v1_api.list_persistent_volume().items or []

    def list_domains(self) -> list[tuple[str, str]]:
        """List (namespace, domain UID) for every domain in the cluster.

        A domain without spec.domainUID uses its resource name as UID.

        Returns:
            List of (namespace, domain UID); empty if the domain CRD is not installed

        Raises:
            ApiException: For any failure other than a missing CRD
        """
        try:
            response = self.custom_objects_api.list_cluster_custom_object(
                group=DOMAIN_GROUP, version=self.domain_version, plural=DOMAIN_PLURAL
            )
        except ApiException as e:
            if e.status == 404:  # CRD not installed yet
                logger.debug(f"Domain custom resource {DOMAIN_PLURAL}.{DOMAIN_GROUP} not found")
                return []
            raise

        domains = []
        for item in response.get("items", []):
            metadata = item.get("metadata", {})
            spec = item.get("spec", {})
            domains.append((metadata.get("namespace"), spec.get("domainUID") or metadata.get("name")))
        logger.debug(f"Found {len(domains)} domains")
        return domains
