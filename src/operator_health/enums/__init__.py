"""Enums for operator health checks."""

from .kube_verb import KubeVerb
from .message_key import MessageKey
from .scope import Scope
from .review_strategy import ReviewStrategy

__all__ = ["KubeVerb", "MessageKey", "Scope", "ReviewStrategy"]
