"""Permission and health verification for the WebLogic Kubernetes operator."""

from .health_check import HealthCheckHelper
from .models import AccessRequirement, GrantedRule, ResourceDescriptor, VerificationResult

__all__ = [
    "HealthCheckHelper",
    "AccessRequirement",
    "GrantedRule",
    "ResourceDescriptor",
    "VerificationResult",
]
