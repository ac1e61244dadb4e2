"""Strategy used to verify operator access."""

from enum import Enum


class ReviewStrategy(Enum):
    """How the operator asks the API server about its own permissions.

    PER_CHECK_REVIEW issues one SelfSubjectAccessReview per requirement.
    BULK_RULES_REVIEW issues one SelfSubjectRulesReview per scope and matches
    the returned rules locally.
    """

    PER_CHECK_REVIEW = "per-check"
    BULK_RULES_REVIEW = "rules-review"

    def __str__(self) -> str:
        return self.value
