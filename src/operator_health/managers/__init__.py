"""Collaborators that answer permission and cluster queries."""

from .base import AccessReviewer

__all__ = ["AccessReviewer"]
