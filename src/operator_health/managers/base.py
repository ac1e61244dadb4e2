"""Abstract base class for permission queries."""

from abc import ABC, abstractmethod
from typing import Optional

from operator_health.enums import KubeVerb
from operator_health.models import GrantedRule


class AccessReviewer(ABC):
    """Answers questions about the permissions of the current subject.

    Implementations must be free of side effects from the caller's point of
    view: asking twice gives the same answer and changes nothing.
    """

    @abstractmethod
    def can_i(
        self,
        namespace: Optional[str],
        resource: str,
        subresource: str,
        api_group: str,
        verb: KubeVerb,
    ) -> bool:
        """Check a single permission.

        Args:
            namespace: Namespace to check in, None for cluster scope
            resource: Resource name, e.g. 'pods'
            subresource: Subresource name, '' if none
            api_group: API group, '' for the core group
            verb: Verb to check

        Returns:
            True if the permission is granted

        Raises:
            PermissionQueryFailed: If the query itself fails
        """
        pass

    @abstractmethod
    def list_rules(self, namespace: Optional[str]) -> list[GrantedRule]:
        """List every rule granted to the current subject in a scope.

        Args:
            namespace: Namespace to review, None for cluster scope

        Returns:
            Rules granted in that scope

        Raises:
            PermissionQueryFailed: If the query itself fails
        """
        pass
