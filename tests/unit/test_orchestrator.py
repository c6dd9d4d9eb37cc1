"""Tests for the deployment orchestrator."""

from pathlib import Path

import pytest
from fakes import FakeEventStream, FakeExecer, daemon_set, fake_look_path, rollout

from kne_deploy.components import KindSpec, MeshnetSpec, MetalLBSpec, SRLinuxSpec
from kne_deploy.config import ComponentEntry, DeploymentFile, KneSettings, MeshnetConfig
from kne_deploy.errors import (
    CommandError,
    ConfigurationError,
    ContextCanceledError,
    DeadlineExceededError,
    StepError,
    WatchError,
)
from kne_deploy.kube import EventType, Kind, WatchEvent
from kne_deploy.orchestrator import Deployment, build_deployment


class StubComponent:
    """Component that records calls into a shared log."""

    def __init__(self, name, log, healthy_errors=()):
        self.name = name
        self.log = log
        self.kube = None
        self._healthy_errors = list(healthy_errors)

    def set_kube_client(self, kube):
        self.kube = kube

    def deploy(self, ctx):
        self.log.append(f"{self.name}.deploy")

    def healthy(self, ctx):
        self.log.append(f"{self.name}.healthy")
        if self._healthy_errors:
            raise self._healthy_errors.pop(0)


def settings(**kw):
    return KneSettings(**{"healthy_retry_wait": 0, **kw})


def test_deploy_order_and_client_injection(ctx):
    log = []
    kube = object()
    seen = []
    dep = Deployment(
        cluster=StubComponent("cluster", log),
        ingress=StubComponent("ingress", log),
        cni=StubComponent("cni", log),
        controllers=[StubComponent("ctrl1", log), StubComponent("ctrl2", log)],
        settings=settings(kubeconfig="/tmp/kc"),
        kube_factory=lambda path: seen.append(path) or kube,
    )

    dep.deploy(ctx)

    assert log == [
        "cluster.deploy", "cluster.healthy",
        "ingress.deploy", "ingress.healthy",
        "cni.deploy", "cni.healthy",
        "ctrl1.deploy", "ctrl1.healthy",
        "ctrl2.deploy", "ctrl2.healthy",
    ]
    assert seen == ["/tmp/kc"]
    assert all(c.kube is kube for c in dep.components)
    assert dep.cluster.kube is None


def test_healthy_retried_on_watch_error(ctx):
    log = []
    flaky = StubComponent("cni", log, healthy_errors=[WatchError("closed"), WatchError("closed")])
    dep = Deployment(StubComponent("cluster", log), StubComponent("ingress", log), flaky,
                     settings=settings(healthy_attempts=3), kube_factory=lambda path: None)

    dep.deploy(ctx)

    assert log.count("cni.healthy") == 3


def test_healthy_retries_exhausted(ctx):
    log = []
    flaky = StubComponent("cni", log, healthy_errors=[WatchError("closed")] * 2)
    dep = Deployment(StubComponent("cluster", log), StubComponent("ingress", log), flaky,
                     controllers=[StubComponent("ctrl", log)],
                     settings=settings(healthy_attempts=2), kube_factory=lambda path: None)

    with pytest.raises(WatchError, match="closed"):
        dep.deploy(ctx)
    assert "ctrl.deploy" not in log


def test_other_errors_not_retried(ctx):
    log = []
    broken = StubComponent("ingress", log, healthy_errors=[ConfigurationError("no subnet")])
    dep = Deployment(StubComponent("cluster", log), broken, StubComponent("cni", log),
                     settings=settings(healthy_attempts=5), kube_factory=lambda path: None)

    with pytest.raises(ConfigurationError):
        dep.deploy(ctx)
    assert log == ["cluster.deploy", "cluster.healthy", "ingress.deploy", "ingress.healthy"]


def test_cancellation_not_retried(canceled_ctx, cluster):
    execer = FakeExecer(None)
    cni = MeshnetSpec(MeshnetConfig(manifest_dir=Path("/m")), execer, fake_look_path())
    dep = Deployment(StubComponent("cluster", []), StubComponent("ingress", []), cni,
                     settings=settings(healthy_attempts=3), kube_factory=lambda path: cluster)

    with pytest.raises(ContextCanceledError):
        dep.deploy(canceled_ctx)
    assert cluster.watched == []


def test_healthy_timeout_per_attempt(ctx, cluster):
    cni = MeshnetSpec(MeshnetConfig(manifest_dir=Path("/m")), FakeExecer(None), fake_look_path())
    dep = Deployment(StubComponent("cluster", []), StubComponent("ingress", []), cni,
                     settings=settings(healthy_timeout=0.05), kube_factory=lambda path: cluster)

    with pytest.raises(DeadlineExceededError):
        dep.deploy(ctx)
    assert cluster.opened[0].stopped.is_set()
    assert ctx.error() is None


def deployment_file(base_dir, **overrides):
    raw = {
        "cluster": {"kind": "Kind", "spec": {"name": "kne", "kubecfg": "/tmp/kc"}},
        "ingress": {"kind": "MetalLB", "spec": {"ipCount": 20, "manifestDir": "manifests/metallb"}},
        "cni": {"kind": "Meshnet", "spec": {"manifestDir": "manifests/meshnet"}},
        "controllers": [{"kind": "SRLinux", "spec": {"manifestDir": "/abs/srlinux"}}],
        "base_dir": base_dir,
    }
    raw.update(overrides)
    return DeploymentFile.model_validate(raw)


def test_build_deployment_maps_kinds_and_paths(tmp_path, kind_networks):
    dep = build_deployment(deployment_file(tmp_path), settings(), FakeExecer(), fake_look_path(["kind"]),
                           kind_networks, kube_factory=lambda path: None)

    assert isinstance(dep.cluster, KindSpec)
    assert isinstance(dep.ingress, MetalLBSpec)
    assert isinstance(dep.cni, MeshnetSpec)
    assert [type(c) for c in dep.controllers] == [SRLinuxSpec]
    assert dep.ingress.cfg.manifest_dir == tmp_path / "manifests" / "metallb"
    assert dep.cni.cfg.manifest_dir == tmp_path / "manifests" / "meshnet"
    assert dep.controllers[0].cfg.manifest_dir == Path("/abs/srlinux")


def test_build_deployment_unknown_kind(tmp_path):
    dep_file = deployment_file(tmp_path, cni={"kind": "Calico", "spec": {}})

    with pytest.raises(ConfigurationError, match="unknown cni kind 'Calico'"):
        build_deployment(dep_file, settings())


def test_build_deployment_invalid_spec(tmp_path):
    dep_file = deployment_file(tmp_path, ingress={"kind": "MetalLB", "spec": {"ipCount": 0}})

    with pytest.raises(ConfigurationError, match="invalid ingress spec for MetalLB"):
        build_deployment(dep_file, settings())


def test_end_to_end(ctx, tmp_path, cluster, kind_networks):
    execer = FakeExecer(None, None, None, None, None)
    cluster.script_watch(
        Kind.DEPLOYMENT,
        FakeEventStream(rollout("controller", "metallb-system")),
        FakeEventStream(rollout("srlinux-controller-controller-manager", "srlinux-controller")),
    )
    cluster.script_watch(Kind.DAEMON_SET, FakeEventStream([
        WatchEvent(EventType.MODIFIED, daemon_set("meshnet", "meshnet", ready=1, desired=1, unavailable=0)),
    ]))
    seen = []
    dep = build_deployment(deployment_file(tmp_path), settings(), execer, fake_look_path(["kind"]),
                           kind_networks, kube_factory=lambda path: seen.append(path) or cluster)

    dep.deploy(ctx)

    assert seen == ["/tmp/kc"]
    assert [c[0] for c in execer.calls] == ["kind", "kubectl", "kubectl", "kubectl", "kubectl"]
    assert cluster.watched == [
        (Kind.DEPLOYMENT, "metallb-system", "controller"),
        (Kind.DAEMON_SET, "meshnet", "meshnet"),
        (Kind.DEPLOYMENT, "srlinux-controller", "srlinux-controller-controller-manager"),
    ]
    assert str(dep.ingress.pool) == "172.18.0.50 - 172.18.0.70"


def test_cluster_failure_stops_everything(ctx, tmp_path, cluster, kind_networks):
    execer = FakeExecer(CommandError("kind create cluster", 1))
    seen = []
    dep = build_deployment(deployment_file(tmp_path), settings(), execer, fake_look_path(["kind"]),
                           kind_networks, kube_factory=lambda path: seen.append(path) or cluster)

    with pytest.raises(StepError, match="failed to create cluster"):
        dep.deploy(ctx)
    assert seen == []
    assert len(execer.calls) == 1


def test_relative_kubecfg_resolved_against_deployment_file(ctx, tmp_path, cluster, kind_networks):
    dep_file = deployment_file(tmp_path, cluster={"kind": "Kind", "spec": {"kubecfg": "out/kubeconfig"}},
                               controllers=[])
    execer = FakeExecer(None, None, None, None)
    cluster.script_watch(Kind.DEPLOYMENT, FakeEventStream(rollout("controller", "metallb-system")))
    cluster.script_watch(Kind.DAEMON_SET, FakeEventStream([
        WatchEvent(EventType.ADDED, daemon_set("meshnet", "meshnet", ready=1, desired=1, unavailable=0)),
    ]))
    seen = []
    dep = build_deployment(dep_file, settings(), execer, fake_look_path(["kind"]), kind_networks,
                           kube_factory=lambda path: seen.append(path) or cluster)

    dep.deploy(ctx)

    want = str(tmp_path / "out" / "kubeconfig")
    assert execer.calls[0][1][-2:] == ("--kubeconfig", want)
    assert seen == [want]
