"""Shared test doubles package.

Contains fakes for the collaborators the health checks talk to and the
scenario types used by parametrized tests.
"""

from .access_checks import AccessChecks
from .denial_scenario import DenialScenario

__all__ = ["AccessChecks", "DenialScenario"]
