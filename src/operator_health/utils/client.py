"""Client creation utilities for Kubernetes."""

import logging
from dataclasses import dataclass

from kubernetes import client, config

logger = logging.getLogger(__name__)


@dataclass
class KubernetesClients:
    """API clients used by the health checks."""

    auth_v1_api: client.AuthorizationV1Api
    core_v1_api: client.CoreV1Api
    version_api: client.VersionApi
    custom_objects_api: client.CustomObjectsApi


class ClientManager:

    @classmethod
    def load_config(cls, context: str = None) -> None:
        """Load in-cluster configuration, falling back to kubeconfig.

        Args:
            context: kubeconfig context to use outside a cluster; the current
                context when None
        """
        try:
            config.load_incluster_config()
            logger.debug("Loaded in-cluster Kubernetes configuration")
        except config.ConfigException:
            config.load_kube_config(context=context)
            logger.debug(f"Loaded kubeconfig (context: {context or 'current'})")

    @classmethod
    def create_k8s_clients(cls, context: str = None) -> KubernetesClients:
        """Create Kubernetes API clients.

        Args:
            context: Optional kubeconfig context

        Returns:
            KubernetesClients sharing one ApiClient

        Raises:
            ConfigException: If neither in-cluster nor kubeconfig configuration is available
        """
        cls.load_config(context)
        api_client = client.ApiClient()
        return KubernetesClients(
            auth_v1_api=client.AuthorizationV1Api(api_client),
            core_v1_api=client.CoreV1Api(api_client),
            version_api=client.VersionApi(api_client),
            custom_objects_api=client.CustomObjectsApi(api_client),
        )
