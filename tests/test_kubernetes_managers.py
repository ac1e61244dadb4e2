import logging
from unittest.mock import MagicMock

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import MaxRetryError, NewConnectionError

from operator_health.enums import KubeVerb, Scope
from operator_health.errors import PermissionQueryFailed
from operator_health.managers.k8s import AuthorizationManager, ClusterInfoManager
from operator_health.models import AccessRequirement, KubernetesVersion, ResourceDescriptor
from .constants.access import NS1, OPERATOR_NAMESPACE


def rules_review_result(rules: list[client.V1ResourceRule], incomplete: bool = False, error: str = None):
    return MagicMock(status=MagicMock(resource_rules=rules, incomplete=incomplete, evaluation_error=error))


@pytest.fixture
def auth_v1_api():
    return MagicMock(spec=client.AuthorizationV1Api)


@pytest.fixture
def manager(auth_v1_api):
    return AuthorizationManager(auth_v1_api, OPERATOR_NAMESPACE)


@pytest.mark.Kubernetes
class TestAuthorizationManagerAccessReview:
    """SelfSubjectAccessReview queries"""

    @pytest.mark.parametrize("allowed", [True, False])
    def test_can_i_reads_allowed_status(self, manager, auth_v1_api, allowed):
        auth_v1_api.create_self_subject_access_review.return_value = MagicMock(status=MagicMock(allowed=allowed))

        assert manager.can_i(NS1, "jobs", "", "batch", KubeVerb.DELETECOLLECTION) is allowed

    def test_can_i_sends_resource_attributes(self, manager, auth_v1_api):
        auth_v1_api.create_self_subject_access_review.return_value = MagicMock(status=MagicMock(allowed=True))

        manager.can_i(NS1, "pods", "log", "", KubeVerb.GET)

        body = auth_v1_api.create_self_subject_access_review.call_args.kwargs["body"]
        attributes = body.spec.resource_attributes
        assert isinstance(body, client.V1SelfSubjectAccessReview)
        assert (attributes.namespace, attributes.resource, attributes.subresource) == (NS1, "pods", "log")
        assert (attributes.group, attributes.verb) == ("", "get")

    def test_cluster_scoped_check_has_no_namespace(self, manager, auth_v1_api):
        auth_v1_api.create_self_subject_access_review.return_value = MagicMock(status=MagicMock(allowed=True))

        manager.can_i(None, "namespaces", "", "", KubeVerb.WATCH)

        body = auth_v1_api.create_self_subject_access_review.call_args.kwargs["body"]
        assert body.spec.resource_attributes.namespace is None
        assert body.spec.resource_attributes.subresource is None

    def test_api_failure_raises_permission_query_failed(self, manager, auth_v1_api):
        auth_v1_api.create_self_subject_access_review.side_effect = ApiException(status=503, reason="Unavailable")

        with pytest.raises(PermissionQueryFailed) as exc_info:
            manager.can_i(NS1, "pods", "", "", KubeVerb.GET)

        assert exc_info.value.status == 503
        assert exc_info.value.namespace == NS1

    def test_connection_failure_raises_permission_query_failed(self, manager, auth_v1_api):
        auth_v1_api.create_self_subject_access_review.side_effect = MaxRetryError(None, "/apis", reason="Connection refused")

        with pytest.raises(PermissionQueryFailed) as exc_info:
            manager.can_i(NS1, "pods", "", "", KubeVerb.GET)

        assert exc_info.value.status is None
        assert exc_info.value.namespace == NS1
        assert isinstance(exc_info.value.__cause__, MaxRetryError)


@pytest.mark.Kubernetes
class TestAuthorizationManagerRulesReview:
    """SelfSubjectRulesReview queries"""

    def test_namespace_rules_are_converted(self, manager, auth_v1_api):
        auth_v1_api.create_self_subject_rules_review.return_value = rules_review_result(
            [client.V1ResourceRule(api_groups=["batch"], resources=["jobs"], verbs=["get", "list"])]
        )

        rules = manager.list_rules(NS1)

        body = auth_v1_api.create_self_subject_rules_review.call_args.kwargs["body"]
        assert body.spec.namespace == NS1
        assert len(rules) == 1
        assert rules[0].api_groups == frozenset(["batch"])
        assert rules[0].verbs == frozenset(["get", "list"])
        assert rules[0].scope is Scope.NAMESPACE
        assert rules[0].covers(
            AccessRequirement(namespace=NS1, resource=ResourceDescriptor.parse("jobs//batch"), verb=KubeVerb.LIST)
        )

    def test_cluster_rules_review_operator_namespace(self, manager, auth_v1_api):
        auth_v1_api.create_self_subject_rules_review.return_value = rules_review_result(
            [client.V1ResourceRule(api_groups=[""], resources=["namespaces"], verbs=["*"])]
        )

        rules = manager.list_rules(None)

        body = auth_v1_api.create_self_subject_rules_review.call_args.kwargs["body"]
        assert body.spec.namespace == OPERATOR_NAMESPACE
        assert rules[0].scope is Scope.CLUSTER

    def test_rule_without_groups_or_resources(self, manager, auth_v1_api):
        auth_v1_api.create_self_subject_rules_review.return_value = rules_review_result(
            [client.V1ResourceRule(verbs=["get"])]
        )

        rules = manager.list_rules(NS1)

        assert rules[0].api_groups == frozenset()
        assert rules[0].resources == frozenset()

    def test_rules_for_named_resources_are_ignored(self, manager, auth_v1_api):
        auth_v1_api.create_self_subject_rules_review.return_value = rules_review_result(
            [
                client.V1ResourceRule(
                    api_groups=[""], resources=["secrets"], verbs=["get", "list", "watch"],
                    resource_names=["only-this-secret"],
                ),
                client.V1ResourceRule(api_groups=[""], resources=["configmaps"], verbs=["get"]),
            ]
        )

        rules = manager.list_rules(NS1)

        list_secrets = AccessRequirement(namespace=NS1, resource=ResourceDescriptor.parse("secrets"), verb=KubeVerb.LIST)
        assert not any(rule.covers(list_secrets) for rule in rules)
        assert [rule.resources for rule in rules] == [frozenset(["configmaps"])]

    def test_incomplete_review_logs_warning(self, manager, auth_v1_api, caplog):
        auth_v1_api.create_self_subject_rules_review.return_value = rules_review_result(
            [], incomplete=True, error="webhook authorizer does not support rules"
        )

        with caplog.at_level(logging.WARNING):
            assert manager.list_rules(NS1) == []

        assert "incomplete" in caplog.text

    def test_api_failure_raises_permission_query_failed(self, manager, auth_v1_api):
        auth_v1_api.create_self_subject_rules_review.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(PermissionQueryFailed) as exc_info:
            manager.list_rules(None)

        assert exc_info.value.status == 403
        assert exc_info.value.namespace is None

    @pytest.mark.parametrize(
        "error",
        [
            MaxRetryError(None, "/apis", reason="Connection refused"),
            NewConnectionError(None, "Failed to establish a new connection"),
            ConnectionResetError("Connection reset by peer"),
        ],
        ids=["max-retries", "new-connection", "connection-reset"],
    )
    def test_network_failure_raises_permission_query_failed(self, manager, auth_v1_api, error):
        auth_v1_api.create_self_subject_rules_review.side_effect = error

        with pytest.raises(PermissionQueryFailed) as exc_info:
            manager.list_rules(NS1)

        assert exc_info.value.namespace == NS1
        assert exc_info.value.__cause__ is error


@pytest.mark.Kubernetes
class TestClusterInfoManager:
    """Version, persistent volume and domain lookups"""

    @pytest.fixture
    def apis(self):
        return MagicMock(spec=client.VersionApi), MagicMock(spec=client.CoreV1Api), MagicMock(spec=client.CustomObjectsApi)

    def test_get_version(self, apis):
        version_api, core_v1_api, custom_objects_api = apis
        version_api.get_code.return_value = MagicMock(major="1", minor="27", git_version="v1.27.4")

        version = ClusterInfoManager(version_api, core_v1_api, custom_objects_api).get_version()

        assert version == KubernetesVersion(1, 27)

    def test_list_persistent_volumes(self, apis):
        version_api, core_v1_api, custom_objects_api = apis
        volume = client.V1PersistentVolume(metadata=client.V1ObjectMeta(name="pv1"))
        core_v1_api.list_persistent_volume.return_value = MagicMock(items=[volume])

        assert ClusterInfoManager(version_api, core_v1_api, custom_objects_api).list_persistent_volumes() == [volume]

    def test_list_domains(self, apis):
        version_api, core_v1_api, custom_objects_api = apis
        custom_objects_api.list_cluster_custom_object.return_value = {
            "items": [
                {"metadata": {"name": "sample", "namespace": "ns1"}, "spec": {"domainUID": "domain1"}},
                {"metadata": {"name": "domain2", "namespace": "ns2"}, "spec": {}},
            ]
        }

        domains = ClusterInfoManager(version_api, core_v1_api, custom_objects_api, "v8").list_domains()

        assert domains == [("ns1", "domain1"), ("ns2", "domain2")]
        custom_objects_api.list_cluster_custom_object.assert_called_once_with(
            group="weblogic.oracle", version="v8", plural="domains"
        )

    def test_list_domains_without_crd(self, apis):
        version_api, core_v1_api, custom_objects_api = apis
        custom_objects_api.list_cluster_custom_object.side_effect = ApiException(status=404, reason="Not Found")

        assert ClusterInfoManager(version_api, core_v1_api, custom_objects_api).list_domains() == []

    def test_list_domains_other_failures_propagate(self, apis):
        version_api, core_v1_api, custom_objects_api = apis
        custom_objects_api.list_cluster_custom_object.side_effect = ApiException(status=500, reason="Boom")

        with pytest.raises(ApiException):
            ClusterInfoManager(version_api, core_v1_api, custom_objects_api).list_domains()
