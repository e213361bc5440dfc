import dataclasses

import pytest

from helm_steward.core.action_config import ActionConfigFactory
from helm_steward.core.errors import ConfigurationError


def test_build_scopes_context_to_namespace(test_settings):
    ctx = ActionConfigFactory(test_settings).build("team-a")

    assert ctx.namespace == "team-a"
    assert ctx.kubeconfig == test_settings.kubeconfig
    assert ctx.repository_file == test_settings.repositories_file
    assert ctx.cache_dir == test_settings.index_cache_dir
    assert ctx.api_configuration.host == "https://127.0.0.1:6443"
    assert ctx.api_configuration.verify_ssl is True
    assert ctx.request_timeout is None


def test_contexts_are_fresh_and_immutable(test_settings):
    factory = ActionConfigFactory(test_settings)
    first, second = factory.build("a"), factory.build("b")

    assert first.namespace == "a"
    assert second.namespace == "b"
    with pytest.raises(dataclasses.FrozenInstanceError):
        first.namespace = "c"


def test_empty_namespace_uses_default(test_settings):
    assert ActionConfigFactory(test_settings).build("").namespace == "default"


def test_insecure_and_timeout_flow_through(test_settings):
    test_settings.kube_insecure_skip_tls_verify = True
    test_settings.timeout = 30

    ctx = ActionConfigFactory(test_settings).build("default")

    assert ctx.insecure_skip_tls_verify is True
    assert ctx.api_configuration.verify_ssl is False
    assert ctx.request_timeout == 30


@pytest.mark.parametrize("namespace", ["Bad_Name", "-leading", "x" * 64])
def test_invalid_namespace(test_settings, namespace):
    with pytest.raises(ConfigurationError, match="invalid namespace"):
        ActionConfigFactory(test_settings).build(namespace)


def test_missing_kubeconfig(test_settings, tmp_path):
    test_settings.kubeconfig = tmp_path / "missing"

    with pytest.raises(ConfigurationError) as exc:
        ActionConfigFactory(test_settings).build("default")

    assert exc.value.namespace == "default"
    assert "missing" in str(exc.value)


def test_unknown_kube_context(test_settings):
    test_settings.kube_context = "nope"

    with pytest.raises(ConfigurationError):
        ActionConfigFactory(test_settings).build("default")
