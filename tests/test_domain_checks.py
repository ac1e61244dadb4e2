import pytest
from kubernetes import client

from operator_health.domain_checks import verify_domain_uid_uniqueness, verify_persistent_volume
from operator_health.enums import MessageKey
from operator_health.health_check import HealthCheckHelper
from .shared import AccessChecks


def persistent_volume(name: str, domain_uid: str = None, access_modes: list[str] = None) -> client.V1PersistentVolume:
    labels = {"weblogic.domainUID": domain_uid} if domain_uid else None
    return client.V1PersistentVolume(
        metadata=client.V1ObjectMeta(name=name, labels=labels),
        spec=client.V1PersistentVolumeSpec(access_modes=access_modes),
    )


@pytest.mark.Domains
class TestDomainUidUniqueness:
    """Domain UIDs must be unique across namespaces"""

    def test_unique_uids_pass(self, sink):
        duplicated = verify_domain_uid_uniqueness([("ns1", "domain1"), ("ns2", "domain2")], sink)

        assert duplicated == []
        assert sink.diagnostics == []

    def test_same_uid_in_two_namespaces_warns(self, sink):
        domains = [("ns1", "domain1"), ("ns2", "domain1"), ("ns2", "domain2")]

        duplicated = verify_domain_uid_uniqueness(domains, sink)

        assert duplicated == ["domain1"]
        assert sink.keys() == [MessageKey.DOMAIN_UID_UNIQUENESS_FAILED]
        assert sink.diagnostics[0].args == ("domain1", ["ns1", "ns2"])

    def test_same_uid_twice_in_one_namespace_is_not_a_conflict(self, sink):
        assert verify_domain_uid_uniqueness([("ns1", "domain1"), ("ns1", "domain1")], sink) == []


@pytest.mark.Domains
class TestPersistentVolume:
    """Each domain needs a ReadWriteMany persistent volume"""

    def test_shared_volume_passes(self, sink):
        volumes = [persistent_volume("pv1", "domain1", ["ReadWriteMany"]), persistent_volume("other")]

        assert verify_persistent_volume("domain1", volumes, sink)
        assert sink.diagnostics == []

    def test_missing_volume_warns(self, sink):
        volumes = [persistent_volume("pv1", "domain2", ["ReadWriteMany"]), persistent_volume("other")]

        assert not verify_persistent_volume("domain1", volumes, sink)
        assert sink.keys() == [MessageKey.PV_NOT_FOUND_FOR_DOMAIN_UID]

    @pytest.mark.parametrize("access_modes", [["ReadWriteOnce"], ["ReadOnlyMany"], None])
    def test_unshareable_volume_warns(self, sink, access_modes):
        volumes = [persistent_volume("pv1", "domain1", access_modes)]

        assert not verify_persistent_volume("domain1", volumes, sink)
        assert sink.keys() == [MessageKey.PV_ACCESS_MODE_FAILED]
        assert sink.diagnostics[0].message == (
            "Persistent volume 'pv1' for domain UID 'domain1' does not allow ReadWriteMany access"
        )


@pytest.mark.Domains
class TestDomainChecks:
    """Combined domain checks run by the health check helper"""

    def test_all_domains_healthy(self, sink):
        helper = HealthCheckHelper(AccessChecks(), sink=sink)
        volumes = [persistent_volume("pv1", "d1", ["ReadWriteMany"]), persistent_volume("pv2", "d2", ["ReadWriteMany"])]

        assert helper.perform_domain_checks([("ns1", "d1"), ("ns2", "d2")], volumes)
        assert sink.diagnostics == []

    def test_every_problem_is_reported(self, sink):
        helper = HealthCheckHelper(AccessChecks(), sink=sink)
        volumes = [persistent_volume("pv1", "d1", ["ReadWriteOnce"])]

        ok = helper.perform_domain_checks([("ns1", "d1"), ("ns2", "d1"), ("ns2", "d2")], volumes)

        assert not ok
        assert sink.keys() == [
            MessageKey.DOMAIN_UID_UNIQUENESS_FAILED,
            MessageKey.PV_ACCESS_MODE_FAILED,
            MessageKey.PV_NOT_FOUND_FOR_DOMAIN_UID,
        ]
