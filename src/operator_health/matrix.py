"""Access matrix: the permissions the operator needs, by scope.

The matrix is a list of rules, each granting a set of verbs on a set of
resources in one scope. Expanding it yields the AccessRequirement set that a
verification run checks. The default matrix ships with the package as YAML and
can be replaced with another file of the same shape.
"""

import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from operator_health.enums import KubeVerb, Scope
from operator_health.errors import AccessMatrixError
from operator_health.models import AccessRequirement, ResourceDescriptor

logger = logging.getLogger(__name__)

DEFAULT_MATRIX_RESOURCE = "access_matrix.yaml"

# YAML section name for each scope
SECTIONS = {
    Scope.NAMESPACE: "namespace_rules",
    Scope.CLUSTER: "cluster_rules",
}


class AccessRule(BaseModel):
    """Every verb in `verbs` is required on every resource in `resources`."""

    resources: tuple[str, ...] = Field(..., min_length=1, description="Compact resource identifiers")
    verbs: tuple[KubeVerb, ...] = Field(..., min_length=1, description="Verbs required on each resource")
    scope: Scope = Field(Scope.NAMESPACE, description="Scope the rule applies in")

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("resources")
    @classmethod
    def _check_resources(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for identifier in value:
            ResourceDescriptor.parse(identifier)
        return value

    @property
    def descriptors(self) -> list[ResourceDescriptor]:
        return [ResourceDescriptor.parse(identifier) for identifier in self.resources]

    def expand(self, namespace: Optional[str]) -> list[AccessRequirement]:
        return [
            AccessRequirement(namespace=namespace, resource=descriptor, verb=verb)
            for descriptor in self.descriptors
            for verb in self.verbs
        ]

    @property
    def size(self) -> int:
        return len(self.resources) * len(self.verbs)


class AccessMatrix(BaseModel):
    """Ordered collection of access rules."""

    rules: tuple[AccessRule, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(frozen=True)

    def rules_for(self, scope: Scope) -> list[AccessRule]:
        return [rule for rule in self.rules if rule.scope is scope]

    def requirements(self, namespace: Optional[str] = None) -> frozenset[AccessRequirement]:
        """Expand the rules for one scope into requirements.

        Args:
            namespace: Target namespace, or None for the cluster scope

        Returns:
            Set of requirements for that scope
        """
        scope = Scope.of(namespace)
        requirements = set()
        for rule in self.rules_for(scope):
            requirements.update(rule.expand(namespace))
        logger.debug(f"Expanded {len(self.rules_for(scope))} {scope} rules into {len(requirements)} requirements")
        return frozenset(requirements)

    @classmethod
    def from_document(cls, document: dict) -> "AccessMatrix":
        """Build a matrix from a parsed YAML document.

        Args:
            document: Mapping with optional 'namespace_rules' and 'cluster_rules' lists

        Returns:
            AccessMatrix

        Raises:
            AccessMatrixError: If the document has the wrong shape or contains an
                unknown verb or invalid resource identifier
        """
        if not isinstance(document, dict):
            raise AccessMatrixError(f"Access matrix must be a mapping, got {type(document).__name__}")

        unknown = set(document) - set(SECTIONS.values())
        if unknown:
            raise AccessMatrixError(f"Unknown access matrix sections: {sorted(unknown)}")

        rules = []
        for scope, section in SECTIONS.items():
            entries = document.get(section) or []
            if not isinstance(entries, list):
                raise AccessMatrixError(f"Section '{section}' must be a list")
            for index, entry in enumerate(entries):
                if not isinstance(entry, dict):
                    raise AccessMatrixError(f"Entry {index} of '{section}' must be a mapping")
                try:
                    rules.append(AccessRule(**entry, scope=scope))
                except (ValidationError, TypeError) as e:
                    raise AccessMatrixError(f"Invalid entry {index} of '{section}': {e}") from e
        return cls(rules=rules)


def load_access_matrix(path: Union[str, Path, None] = None) -> AccessMatrix:
    """Load an access matrix from YAML.

    Args:
        path: File to load; the packaged default matrix when None

    Returns:
        AccessMatrix

    Raises:
        AccessMatrixError: If the file cannot be read or is malformed
    """
    if path is None:
        return default_access_matrix()

    logger.info(f"Loading access matrix from {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise AccessMatrixError(f"Cannot read access matrix '{path}': {e}") from e
    except yaml.YAMLError as e:
        raise AccessMatrixError(f"Cannot parse access matrix '{path}': {e}") from e
    return AccessMatrix.from_document(document)


@lru_cache(maxsize=1)
def default_access_matrix() -> AccessMatrix:
    """Get the access matrix shipped with the package."""
    text = (resources.files("operator_health") / "data" / DEFAULT_MATRIX_RESOURCE).read_text(encoding="utf-8")
    return AccessMatrix.from_document(yaml.safe_load(text))


def build_namespace_requirements(
    namespace: str, matrix: Optional[AccessMatrix] = None
) -> frozenset[AccessRequirement]:
    """Build the requirements the operator must pass in a target namespace.

    Args:
        namespace: Target namespace
        matrix: Matrix to expand; the default matrix when None

    Returns:
        Set of namespaced requirements

    Raises:
        ValueError: If namespace is empty
    """
    if not namespace or not namespace.strip():
        raise ValueError("namespace cannot be empty")
    return (matrix if matrix is not None else default_access_matrix()).requirements(namespace.strip())


def build_cluster_requirements(matrix: Optional[AccessMatrix] = None) -> frozenset[AccessRequirement]:
    """Build the cluster-scoped requirements the operator must pass."""
    return (matrix if matrix is not None else default_access_matrix()).requirements(None)
