"""Pytest configuration and fixtures."""

import logging

import pytest

from operator_health.diagnostics import LoggingDiagnosticSink
from operator_health.health_check import HealthCheckHelper
from .constants.access import TARGET_NAMESPACES
from .shared import AccessChecks

logger = logging.getLogger(__name__)


@pytest.fixture
def sink():
    """Diagnostic sink recording every warning."""
    return LoggingDiagnosticSink()


@pytest.fixture
def access_checks():
    """Fake reviewer expecting every access check for all target namespaces and the cluster."""
    checks = AccessChecks.expecting(TARGET_NAMESPACES)
    logger.debug(f"Expecting {len(checks.expected_access_checks)} access checks")
    return checks


@pytest.fixture
def helper(access_checks, sink):
    return HealthCheckHelper(access_checks, sink=sink)
