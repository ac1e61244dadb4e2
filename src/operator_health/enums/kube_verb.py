"""Kubernetes RBAC verb enumeration for access verification."""

from enum import Enum


class KubeVerb(Enum):
    """Kubernetes RBAC verbs the operator may need on a resource.

    The set is closed: a verb that is not listed here cannot appear in an
    access requirement, so a misspelled verb fails loudly instead of producing
    a check that can never match.
    """

    GET = "get"
    LIST = "list"
    WATCH = "watch"
    CREATE = "create"
    UPDATE = "update"
    PATCH = "patch"
    DELETE = "delete"
    DELETECOLLECTION = "deletecollection"

    def __str__(self) -> str:
        """Return the string value of the verb.

        Returns:
            String representation of the Kubernetes verb
        """
        return self.value

