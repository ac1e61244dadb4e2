"""Reconcile required access against what the API server granted."""

import logging
from typing import Iterable, Mapping

from operator_health.diagnostics import DiagnosticSink, LoggingDiagnosticSink
from operator_health.enums import MessageKey
from operator_health.models import AccessRequirement, Denial, GrantedRule, VerificationResult

logger = logging.getLogger(__name__)


def ordered(requirements: Iterable[AccessRequirement]) -> list[AccessRequirement]:
    """Sort requirements into a stable evaluation order."""
    return sorted(requirements, key=AccessRequirement.sort_key)


def is_covered(requirement: AccessRequirement, grants: Iterable[GrantedRule]) -> bool:
    return any(rule.covers(requirement) for rule in grants)


class AccessReconciler:
    """Turns per-requirement decisions into a VerificationResult.

    Every requirement is evaluated, even after a denial, so a single run
    reports every missing permission. Each denial is reported to the sink:
    namespaced denials under VERIFY_ACCESS_DENIED_WITH_NS, cluster denials
    under VERIFY_ACCESS_DENIED.
    """

    def __init__(self, sink: DiagnosticSink = None):
        self.sink = sink or LoggingDiagnosticSink()

    def verify(
        self, requirements: Iterable[AccessRequirement], grants: Iterable[GrantedRule]
    ) -> VerificationResult:
        """Check requirements against granted rules.

        Args:
            requirements: Requirements to check
            grants: Rules granted to the subject

        Returns:
            VerificationResult with one decision per requirement
        """
        grants = list(grants)
        decisions = {requirement: is_covered(requirement, grants) for requirement in ordered(requirements)}
        logger.debug(f"Matched {len(decisions)} requirements against {len(grants)} granted rules")
        return self.verify_decisions(decisions)

    def verify_decisions(self, decisions: Mapping[AccessRequirement, bool]) -> VerificationResult:
        """Build a result from decisions that were already made.

        Args:
            decisions: Allowed/denied per requirement

        Returns:
            VerificationResult; healthy iff every decision is True
        """
        result = VerificationResult()
        for requirement in ordered(decisions):
            allowed = bool(decisions[requirement])
            result.decisions[requirement] = allowed
            if not allowed:
                result.denials.append(self._deny(requirement))

        if result.healthy:
            logger.debug(f"All {len(result.decisions)} access checks passed")
        else:
            logger.info(f"{len(result.denials)} of {len(result.decisions)} access checks were denied")
        return result

    def _deny(self, requirement: AccessRequirement) -> Denial:
        if requirement.namespace is None:
            key = MessageKey.VERIFY_ACCESS_DENIED
            self.sink.warning(key, requirement.verb.value, requirement.resource.to_identifier())
        else:
            key = MessageKey.VERIFY_ACCESS_DENIED_WITH_NS
            self.sink.warning(
                key, requirement.verb.value, requirement.resource.to_identifier(), requirement.namespace
            )
        return Denial(requirement=requirement, message_key=key)
