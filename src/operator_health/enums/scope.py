"""Scope of an access requirement or granted rule."""

from enum import Enum


class Scope(Enum):
    """Whether a permission applies cluster-wide or inside one namespace."""

    CLUSTER = "cluster"
    NAMESPACE = "namespace"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def of(cls, namespace: str | None) -> "Scope":
        """Get the scope implied by an optional namespace.

        Args:
            namespace: Namespace name, or None for cluster scope

        Returns:
            Scope.CLUSTER when namespace is None, Scope.NAMESPACE otherwise
        """
        return cls.CLUSTER if namespace is None else cls.NAMESPACE
