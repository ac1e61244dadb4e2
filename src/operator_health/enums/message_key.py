"""Message keys for health check diagnostics."""

from enum import Enum


class MessageKey(str, Enum):
    """Keys identifying each class of health check warning."""

    VERIFY_ACCESS_DENIED = "VERIFY_ACCESS_DENIED"
    VERIFY_ACCESS_DENIED_WITH_NS = "VERIFY_ACCESS_DENIED_WITH_NS"
    DOMAIN_UID_UNIQUENESS_FAILED = "DOMAIN_UID_UNIQUENESS_FAILED"
    PV_ACCESS_MODE_FAILED = "PV_ACCESS_MODE_FAILED"
    PV_NOT_FOUND_FOR_DOMAIN_UID = "PV_NOT_FOUND_FOR_DOMAIN_UID"

    def template(self) -> str:
        """Get the log message template for this key.

        Returns:
            A str.format template; positional args are supplied by the caller
        """
        templates = {
            MessageKey.VERIFY_ACCESS_DENIED: "Access denied for operation {0} on resource {1}",
            MessageKey.VERIFY_ACCESS_DENIED_WITH_NS: (
                "Access denied for operation {0} on resource {1} in namespace {2}"
            ),
            MessageKey.DOMAIN_UID_UNIQUENESS_FAILED: (
                "Domain UID '{0}' is used by domains in more than one namespace: {1}"
            ),
            MessageKey.PV_ACCESS_MODE_FAILED: (
                "Persistent volume '{0}' for domain UID '{1}' does not allow ReadWriteMany access"
            ),
            MessageKey.PV_NOT_FOUND_FOR_DOMAIN_UID: (
                "No persistent volume labeled for domain UID '{0}' was found"
            ),
        }
        return templates[self]

    def render(self, *args) -> str:
        return self.template().format(*args)
