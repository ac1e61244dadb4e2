"""Data model for operator access verification."""

from .resource import ResourceDescriptor
from .access import AccessRequirement, GrantedRule, Denial, VerificationResult, HealthReport
from .version import KubernetesVersion

__all__ = [
    "ResourceDescriptor",
    "AccessRequirement",
    "GrantedRule",
    "Denial",
    "VerificationResult",
    "HealthReport",
    "KubernetesVersion",
]
