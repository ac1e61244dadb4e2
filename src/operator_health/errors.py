"""Exceptions raised by operator health checks.

Access denials are not exceptions: they are recorded in a VerificationResult.
The classes here cover inputs that cannot be interpreted and collaborator
calls that fail outright.
"""

from typing import Optional


class HealthCheckError(Exception):
    """Base class for health check failures."""


class InvalidResourceIdentifier(HealthCheckError, ValueError):
    """Raised when a compact resource identifier cannot be parsed."""

    def __init__(self, identifier: str, reason: str):
        self.identifier = identifier
        self.reason = reason
        super().__init__(f"Invalid resource identifier '{identifier}': {reason}")


class InvalidKubernetesVersion(HealthCheckError, ValueError):
    """Raised when a Kubernetes version string cannot be parsed."""


class AccessMatrixError(HealthCheckError):
    """Raised when an access matrix document is malformed."""


class PermissionQueryFailed(HealthCheckError):
    """Raised when the API server could not answer a permission query.

    Attributes:
        namespace: Namespace of the failed query, None for cluster scope
        status: HTTP status reported by the API server, if any
    """

    def __init__(self, message: str, namespace: Optional[str] = None, status: Optional[int] = None):
        self.namespace = namespace
        self.status = status
        super().__init__(message)
