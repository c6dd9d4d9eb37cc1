# /*
# Copyright 2026 The KNE Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Orchestration that runs each component's deploy and readiness check in order."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ValidationError
from rich.panel import Panel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from kne_deploy import console, logger
from kne_deploy.components import (
    CLUSTER_KINDS,
    CNI_KINDS,
    CONTROLLER_KINDS,
    INGRESS_KINDS,
    Component,
    ComponentSpec,
    KindSpec,
    MetalLBSpec,
)
from kne_deploy.config import ComponentEntry, DeploymentFile, KneSettings
from kne_deploy.context import Context
from kne_deploy.errors import ConfigurationError, WatchError
from kne_deploy.execer import Execer, PathResolver, look_path
from kne_deploy.kube import ClusterClient, KubeClient
from kne_deploy.network import NetworkClient

KubeFactory = Callable[[str | None], ClusterClient]


# ============================================================================
# Internal helpers
# ============================================================================

def _resolve_paths(cfg: BaseModel, base_dir: Path) -> BaseModel:
    """Anchor relative path fields of *cfg* at *base_dir*.

    Args:
        cfg: Component config model.
        base_dir: Directory of the deployment file.

    Returns:
        A copy of *cfg* with absolute paths, or *cfg* itself if nothing changed.
    """
    def _anchor(p: Path) -> Path:
        return p if p.is_absolute() else base_dir / p

    updates: dict = {}
    for name in type(cfg).model_fields:
        value = getattr(cfg, name)
        if isinstance(value, Path):
            updates[name] = _anchor(value)
        elif isinstance(value, list) and value and all(isinstance(v, Path) for v in value):
            updates[name] = [_anchor(v) for v in value]
    return cfg.model_copy(update=updates) if updates else cfg


def _build_component(
    section: str,
    entry: ComponentEntry,
    kinds: dict[str, type[ComponentSpec]],
    base_dir: Path,
    execer: Execer | None,
    path_resolver: PathResolver,
    networks: NetworkClient | None,
) -> ComponentSpec:
    """Instantiate the spec class registered for ``entry.kind``.

    Raises:
        ConfigurationError: If the kind is unknown or its spec is invalid.
    """
    cls = kinds.get(entry.kind)
    if cls is None:
        known = ", ".join(sorted(kinds))
        raise ConfigurationError(f"unknown {section} kind {entry.kind!r} (expected one of: {known})")
    try:
        cfg = cls.config_model.model_validate(entry.spec)
    except ValidationError as err:
        raise ConfigurationError(f"invalid {section} spec for {entry.kind}: {err}") from err
    cfg = _resolve_paths(cfg, base_dir)
    if issubclass(cls, MetalLBSpec):
        return cls(cfg, execer, path_resolver, networks=networks)
    return cls(cfg, execer, path_resolver)


# ============================================================================
# Deployment
# ============================================================================

@dataclass
class Deployment:
    """A cluster plus the components installed on it, in dependency order.

    Attributes:
        cluster: Cluster provisioner; must be deployed before anything else.
        ingress: Load balancer.
        cni: Interface mesh.
        controllers: Network-element operators.
        settings: Readiness timeout, retry and kubeconfig settings.
        kube_factory: Builds the cluster client once the cluster exists.
    """

    cluster: Component
    ingress: Component
    cni: Component
    controllers: list[Component] = field(default_factory=list)
    settings: KneSettings = field(default_factory=KneSettings)
    kube_factory: KubeFactory = KubeClient.from_kubeconfig

    @property
    def components(self) -> list[Component]:
        return [self.ingress, self.cni, *self.controllers]

    def deploy(self, ctx: Context) -> None:
        """Deploy the cluster, then deploy and verify each component in turn.

        Raises:
            DeployError: From the first component that fails; later ones are not touched.
        """
        self.deploy_cluster(ctx)
        kube = self.kube_factory(self._kubeconfig())
        for comp in self.components:
            comp.set_kube_client(kube)
        for comp in self.components:
            logger.info("Deploying %s", comp.name)
            comp.deploy(ctx)
            self.wait_healthy(ctx, comp)
        console.print(Panel.fit("Deployment complete", style="bold green"))

    def deploy_cluster(self, ctx: Context) -> None:
        self.cluster.deploy(ctx)
        self.wait_healthy(ctx, self.cluster)

    def wait_healthy(self, ctx: Context, comp: Component) -> None:
        """Run ``comp.healthy`` under a per-attempt timeout, retrying failed watches.

        Only :class:`WatchError` is retried; cancellation and every other
        failure end the pass immediately.
        """
        settings = self.settings

        @retry(
            stop=stop_after_attempt(settings.healthy_attempts),
            wait=wait_fixed(settings.healthy_retry_wait),
            retry=retry_if_exception_type(WatchError),
            before_sleep=lambda state: logger.warning(
                "%s readiness watch failed (attempt %d): %s",
                comp.name, state.attempt_number, state.outcome.exception(),
            ),
            reraise=True,
        )
        def _attempt() -> None:
            with ctx.with_timeout(settings.healthy_timeout) as attempt_ctx:
                comp.healthy(attempt_ctx)

        _attempt()

    def _kubeconfig(self) -> str | None:
        if self.settings.kubeconfig:
            return self.settings.kubeconfig
        if isinstance(self.cluster, KindSpec) and self.cluster.cfg.kubecfg is not None:
            return str(self.cluster.cfg.kubecfg)
        return None


def build_deployment(
    dep: DeploymentFile,
    settings: KneSettings | None = None,
    execer: Execer | None = None,
    path_resolver: PathResolver = look_path,
    networks: NetworkClient | None = None,
    kube_factory: KubeFactory = KubeClient.from_kubeconfig,
) -> Deployment:
    """Turn a parsed deployment file into a runnable :class:`Deployment`.

    Args:
        dep: Parsed deployment file.
        settings: Process settings, or None to load them from the environment.
        execer: Command executor shared by every component, or None for the default.
        path_resolver: Resolves CLI tools on PATH.
        networks: Container network client for the load balancer, or None for Docker.
        kube_factory: Builds the cluster client from a kubeconfig path.

    Returns:
        The deployment, not yet started.

    Raises:
        ConfigurationError: If any entry names an unknown kind or has an invalid spec.
    """
    def _build(section: str, entry: ComponentEntry, kinds: dict[str, type[ComponentSpec]]) -> ComponentSpec:
        return _build_component(section, entry, kinds, dep.base_dir, execer, path_resolver, networks)

    return Deployment(
        cluster=_build("cluster", dep.cluster, CLUSTER_KINDS),
        ingress=_build("ingress", dep.ingress, INGRESS_KINDS),
        cni=_build("cni", dep.cni, CNI_KINDS),
        controllers=[_build("controller", c, CONTROLLER_KINDS) for c in dep.controllers],
        settings=settings if settings is not None else KneSettings(),
        kube_factory=kube_factory,
    )
