"""Kubernetes server version handling."""

import re
from dataclasses import dataclass
from typing import Any

from operator_health.errors import InvalidKubernetesVersion

_VERSION_PATTERN = re.compile(r"^v?(\d+)\.(\d+)")
_LEADING_DIGITS = re.compile(r"^(\d+)")


@dataclass(frozen=True, order=True)
class KubernetesVersion:
    """Major and minor version of a Kubernetes API server."""

    major: int
    minor: int

    @classmethod
    def parse(cls, value: str) -> "KubernetesVersion":
        """Parse a version string such as '1.8', 'v1.18.3' or 'v1.27.4+k3s1'.

        Args:
            value: Version string

        Returns:
            KubernetesVersion

        Raises:
            InvalidKubernetesVersion: If no major.minor prefix can be found
        """
        match = _VERSION_PATTERN.match(value.strip()) if isinstance(value, str) else None
        if match is None:
            raise InvalidKubernetesVersion(f"Cannot parse Kubernetes version '{value}'")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def from_version_info(cls, info: Any) -> "KubernetesVersion":
        """Build a version from a kubernetes.client.VersionInfo.

        Managed clusters report minor versions like '18+', so only the leading
        digits are used. When major/minor are unusable, git_version is parsed.

        Args:
            info: VersionInfo returned by VersionApi.get_code()

        Returns:
            KubernetesVersion
        """
        major = _LEADING_DIGITS.match(str(getattr(info, "major", "") or ""))
        minor = _LEADING_DIGITS.match(str(getattr(info, "minor", "") or ""))
        if major and minor:
            return cls(int(major.group(1)), int(minor.group(1)))
        return cls.parse(getattr(info, "git_version", "") or "")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"
