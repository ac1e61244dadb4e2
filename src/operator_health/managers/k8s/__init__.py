"""Kubernetes resource managers."""

from .authorization import AuthorizationManager
from .cluster import ClusterInfoManager

__all__ = ["AuthorizationManager", "ClusterInfoManager"]
