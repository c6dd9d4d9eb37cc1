"""Tests for the Ixia operator component."""

import json
from pathlib import Path

import pytest
import yaml
from fakes import FakeEventStream, FakeExecer, fake_look_path, rollout

from kne_deploy.components.ixiatg import IxiaTGSpec, config_map_manifest
from kne_deploy.config import IxiaTGConfig, IxiaTGConfigMap
from kne_deploy.errors import CommandError, ConfigurationError, ContextCanceledError, StepError
from kne_deploy.kube import Kind

INLINE = {
    "release": "0.0.1-9999",
    "images": [{"name": "controller", "path": "ghcr.io/open-traffic-generator/keng-controller", "tag": "0.1"}],
}


class RecordingExecer(FakeExecer):
    """FakeExecer that also keeps the contents of each applied manifest."""

    def __init__(self, *results):
        super().__init__(*results)
        self.applied: list[str] = []

    def exec(self, cmd, *args):
        if args[:2] == ("apply", "-f"):
            self.applied.append(Path(args[2]).read_text())
        return super().exec(cmd, *args)


@pytest.fixture
def manifest_dir(tmp_path):
    (tmp_path / "ixiatg-operator.yaml").write_text("kind: Namespace\n")
    return tmp_path


def make_spec(execer, cluster, manifest_dir, config_map=None):
    spec = IxiaTGSpec(IxiaTGConfig(manifest_dir=manifest_dir, config_map=config_map), execer, fake_look_path())
    spec.set_kube_client(cluster)
    return spec


def test_config_map_file(ctx, cluster, manifest_dir):
    (manifest_dir / "ixiatg-configmap.yaml").write_text("kind: ConfigMap\n")
    execer = RecordingExecer(None, None)
    cluster.script_watch(Kind.DEPLOYMENT, FakeEventStream(rollout("ixiatg-op-controller-manager", "ixiatg-op-system", 2)))
    spec = make_spec(execer, cluster, manifest_dir)

    spec.deploy(ctx)
    spec.healthy(ctx)

    assert execer.calls == [
        ("kubectl", ("apply", "-f", str(manifest_dir / "ixiatg-operator.yaml"))),
        ("kubectl", ("apply", "-f", str(manifest_dir / "ixiatg-configmap.yaml"))),
    ]
    assert execer.applied[1] == "kind: ConfigMap\n"
    assert cluster.watched == [(Kind.DEPLOYMENT, "ixiatg-op-system", "ixiatg-op-controller-manager")]


def test_inline_config_map(ctx, cluster, manifest_dir):
    (manifest_dir / "ixiatg-configmap.yaml").write_text("ignored: true\n")
    execer = RecordingExecer(None, None)
    cluster.script_watch(Kind.DEPLOYMENT, FakeEventStream(rollout("ixiatg-op-controller-manager", "ixiatg-op-system")))
    spec = make_spec(execer, cluster, manifest_dir, IxiaTGConfigMap.model_validate(INLINE))

    spec.deploy(ctx)
    spec.healthy(ctx)

    tmp_manifest = Path(execer.calls[1][1][2])
    assert not tmp_manifest.exists()
    doc = yaml.safe_load(execer.applied[1])
    assert doc["metadata"] == {"name": "ixiatg-release-config", "namespace": "ixiatg-op-system"}
    assert json.loads(doc["data"]["versions"]) == INLINE


def test_config_map_not_found(ctx, cluster, manifest_dir):
    execer = FakeExecer(None)
    spec = make_spec(execer, cluster, manifest_dir)

    with pytest.raises(ConfigurationError, match="ixia configmap not found"):
        spec.deploy(ctx)
    assert len(execer.calls) == 1


def test_operator_error(ctx, cluster, manifest_dir):
    execer = FakeExecer(CommandError("kubectl apply", 1, "operator error"))
    spec = make_spec(execer, cluster, manifest_dir, IxiaTGConfigMap.model_validate(INLINE))

    with pytest.raises(StepError, match="failed to apply operator"):
        spec.deploy(ctx)
    assert len(execer.calls) == 1


def test_config_map_apply_error_removes_temp_file(ctx, cluster, manifest_dir):
    execer = FakeExecer(None, CommandError("kubectl apply", 1, "configmap error"))
    spec = make_spec(execer, cluster, manifest_dir, IxiaTGConfigMap.model_validate(INLINE))

    with pytest.raises(StepError, match="failed to apply configmap"):
        spec.deploy(ctx)
    assert not Path(execer.calls[1][1][2]).exists()


def test_healthy_canceled(ctx, canceled_ctx, cluster, manifest_dir):
    spec = make_spec(FakeExecer(None, None), cluster, manifest_dir, IxiaTGConfigMap.model_validate(INLINE))
    spec.deploy(ctx)

    with pytest.raises(ContextCanceledError):
        spec.healthy(canceled_ctx)


def test_config_map_manifest_without_images():
    manifest = config_map_manifest(IxiaTGConfigMap(release="local"))

    assert json.loads(manifest["data"]["versions"]) == {"release": "local", "images": []}
