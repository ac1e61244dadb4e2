"""Compact resource identifiers.

Resources are written as ``resource[/subresource[/apiGroup]]``. The segments are
positional, so a resource in a named API group without a subresource keeps an
empty middle segment: ``jobs//batch``.
"""

from pydantic import BaseModel, ConfigDict, Field

from operator_health.errors import InvalidResourceIdentifier

SEPARATOR = "/"
MAX_SEGMENTS = 3


class ResourceDescriptor(BaseModel):
    """A Kubernetes resource, optional subresource and optional API group."""

    resource: str = Field(..., min_length=1, description="Plural resource name, e.g. 'pods'")
    subresource: str = Field("", description="Subresource name, e.g. 'log'; empty if none")
    api_group: str = Field("", description="API group; empty for the core group")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def parse(cls, identifier: str) -> "ResourceDescriptor":
        """Parse a compact resource identifier.

        Args:
            identifier: One of 'resource', 'resource/subresource',
                'resource//apiGroup' or 'resource/subresource/apiGroup'

        Returns:
            ResourceDescriptor with missing segments set to ''

        Raises:
            InvalidResourceIdentifier: If the identifier is empty, has an empty
                resource segment, ends with an empty segment, or has more than
                two separators
        """
        if not isinstance(identifier, str) or not identifier:
            raise InvalidResourceIdentifier(str(identifier), "identifier is empty")

        segments = identifier.split(SEPARATOR)
        if len(segments) > MAX_SEGMENTS:
            raise InvalidResourceIdentifier(
                identifier, f"expected at most {MAX_SEGMENTS - 1} separators, found {len(segments) - 1}"
            )
        if not segments[0]:
            raise InvalidResourceIdentifier(identifier, "resource segment is empty")
        # An empty subresource is only meaningful when an API group follows it
        if len(segments) > 1 and not segments[-1]:
            raise InvalidResourceIdentifier(identifier, "trailing segment is empty")

        segments += [""] * (MAX_SEGMENTS - len(segments))
        return cls(resource=segments[0], subresource=segments[1], api_group=segments[2])

    def to_identifier(self) -> str:
        """Render the descriptor back into compact identifier form."""
        if self.api_group:
            return SEPARATOR.join([self.resource, self.subresource, self.api_group])
        if self.subresource:
            return SEPARATOR.join([self.resource, self.subresource])
        return self.resource

    @property
    def full_resource(self) -> str:
        """Resource name as it appears in an RBAC rule, e.g. 'pods/log'."""
        if self.subresource:
            return f"{self.resource}{SEPARATOR}{self.subresource}"
        return self.resource

    def __str__(self) -> str:
        return self.to_identifier()
