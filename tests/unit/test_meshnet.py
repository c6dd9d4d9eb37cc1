"""Tests for the meshnet component."""

from pathlib import Path

import pytest
from fakes import FakeEventStream, FakeExecer, daemon_set, fake_look_path

from kne_deploy.components.meshnet import MeshnetSpec
from kne_deploy.config import MeshnetConfig
from kne_deploy.errors import CommandError, ContextCanceledError, StepError, WatchError
from kne_deploy.kube import EventType, Kind, WatchEvent


def make_spec(execer, cluster):
    spec = MeshnetSpec(MeshnetConfig(manifest_dir=Path("/manifests/meshnet/base")), execer, fake_look_path())
    spec.set_kube_client(cluster)
    return spec


def test_deploy_and_healthy(ctx, cluster):
    execer = FakeExecer(None)
    cluster.script_watch(Kind.DAEMON_SET, FakeEventStream([
        WatchEvent(EventType.ADDED, daemon_set("meshnet", "meshnet", ready=0, desired=3, unavailable=3)),
        WatchEvent(EventType.MODIFIED, daemon_set("meshnet", "meshnet", ready=3, desired=3, unavailable=0)),
    ]))
    spec = make_spec(execer, cluster)

    spec.deploy(ctx)
    spec.healthy(ctx)

    assert execer.calls == [("kubectl", ("apply", "-k", "/manifests/meshnet/base"))]
    assert cluster.watched == [(Kind.DAEMON_SET, "meshnet", "meshnet")]


def test_deploy_error(ctx, cluster):
    spec = make_spec(FakeExecer(CommandError("kubectl apply", 1, "bad kustomization")), cluster)

    with pytest.raises(StepError, match="failed to deploy meshnet: .*bad kustomization"):
        spec.deploy(ctx)


def test_healthy_canceled(ctx, canceled_ctx, cluster):
    spec = make_spec(FakeExecer(None), cluster)
    spec.deploy(ctx)

    with pytest.raises(ContextCanceledError):
        spec.healthy(canceled_ctx)


def test_healthy_watch_closed(ctx, cluster):
    cluster.script_watch(Kind.DAEMON_SET, FakeEventStream([], close=True))
    spec = make_spec(FakeExecer(None), cluster)
    spec.deploy(ctx)

    with pytest.raises(WatchError):
        spec.healthy(ctx)
