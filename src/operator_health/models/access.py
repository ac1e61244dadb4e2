"""Access requirements, granted rules and verification results."""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from operator_health.enums import KubeVerb, MessageKey, ReviewStrategy, Scope
from .resource import ResourceDescriptor

WILDCARD = "*"


class AccessRequirement(BaseModel):
    """One permission check the operator needs to pass.

    A requirement without a namespace is cluster-scoped.
    """

    namespace: Optional[str] = Field(None, description="Target namespace; None for cluster scope")
    resource: ResourceDescriptor = Field(..., description="Resource the verb applies to")
    verb: KubeVerb = Field(..., description="Kubernetes verb")

    model_config = ConfigDict(frozen=True)

    @field_validator("namespace")
    @classmethod
    def _check_namespace(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("namespace cannot be empty; use None for cluster scope")
        return value

    @property
    def scope(self) -> Scope:
        return Scope.of(self.namespace)

    def sort_key(self) -> tuple[str, str, int]:
        """Key giving requirements a stable order: scope, resource, then verb order."""
        return (self.namespace or "", self.resource.to_identifier(), list(KubeVerb).index(self.verb))

    def __str__(self) -> str:
        where = f" in namespace {self.namespace}" if self.namespace else ""
        return f"{self.verb} {self.resource}{where}"


class GrantedRule(BaseModel):
    """A rule returned by a rules review, granting verbs on resources.

    Resources may be plain ('pods') or compound ('pods/log'), and any of the
    three sets may contain the '*' wildcard.
    """

    api_groups: frozenset[str] = Field(default_factory=frozenset)
    resources: frozenset[str] = Field(default_factory=frozenset)
    verbs: frozenset[str] = Field(default_factory=frozenset)
    scope: Scope = Scope.NAMESPACE

    model_config = ConfigDict(frozen=True)

    def covers(self, requirement: AccessRequirement) -> bool:
        """Check whether this rule grants a requirement.

        Args:
            requirement: Requirement to test

        Returns:
            True if scope, API group, resource and verb all match
        """
        if requirement.scope is not self.scope:
            return False
        if not self._matches(self.api_groups, requirement.resource.api_group):
            return False
        if not self._matches(self.verbs, requirement.verb.value):
            return False
        return self._matches_resource(requirement.resource)

    def _matches_resource(self, descriptor: ResourceDescriptor) -> bool:
        if self._matches(self.resources, descriptor.full_resource):
            return True
        if descriptor.subresource:
            return (
                f"{descriptor.resource}/{WILDCARD}" in self.resources
                or f"{WILDCARD}/{descriptor.subresource}" in self.resources
            )
        return False

    @staticmethod
    def _matches(granted: frozenset[str], wanted: str) -> bool:
        return WILDCARD in granted or wanted in granted


@dataclass(frozen=True)
class Denial:
    """A requirement that was not granted, and the warning it produced."""

    requirement: AccessRequirement
    message_key: MessageKey


@dataclass
class VerificationResult:
    """Outcome of verifying a set of requirements.

    Attributes:
        decisions: Allowed/denied per requirement
        denials: Denied requirements, in evaluation order
    """

    decisions: dict[AccessRequirement, bool] = field(default_factory=dict)
    denials: list[Denial] = field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return not self.denials

    @property
    def denied_requirements(self) -> list[AccessRequirement]:
        return [denial.requirement for denial in self.denials]

    def is_allowed(self, requirement: AccessRequirement) -> bool:
        return self.decisions.get(requirement, False)

    def merge(self, other: "VerificationResult") -> "VerificationResult":
        """Combine two results into a new one; neither input is modified."""
        return VerificationResult(
            decisions={**self.decisions, **other.decisions},
            denials=[*self.denials, *other.denials],
        )


@dataclass
class HealthReport:
    """Security check outcome for the cluster and every target namespace.

    Attributes:
        strategy: Review strategy that produced the results
        cluster: Cluster-scoped result
        namespaces: Result per target namespace, in evaluation order
        isolate_namespace_failures: When True, a namespace with denials is
            skipped instead of failing the whole report
    """

    strategy: ReviewStrategy
    cluster: Optional[VerificationResult] = None
    namespaces: dict[str, VerificationResult] = field(default_factory=dict)
    isolate_namespace_failures: bool = False

    @property
    def usable_namespaces(self) -> list[str]:
        return [ns for ns, result in self.namespaces.items() if result.healthy]

    @property
    def skipped_namespaces(self) -> list[str]:
        return [ns for ns, result in self.namespaces.items() if not result.healthy]

    @property
    def cluster_healthy(self) -> bool:
        return self.cluster is None or self.cluster.healthy

    @property
    def healthy(self) -> bool:
        if not self.cluster_healthy:
            return False
        if self.isolate_namespace_failures:
            return True
        return not self.skipped_namespaces

    @property
    def denials(self) -> list[Denial]:
        denials = [d for result in self.namespaces.values() for d in result.denials]
        if self.cluster is not None:
            denials.extend(self.cluster.denials)
        return denials
