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

"""kind cluster lifecycle, registry access for nodes, and image preloading."""

from __future__ import annotations

from pathlib import Path

from rich.panel import Panel

from kne_deploy import console, logger
from kne_deploy.components.base import ComponentSpec
from kne_deploy.config import KindConfig
from kne_deploy.constants import (
    DOCKER_CMD,
    DOCKER_CONFIG_PATH,
    GAR_LOGIN_USER,
    GCLOUD_CMD,
    KIND_CMD,
    NODE_KUBELET_CONFIG,
)
from kne_deploy.context import Context
from kne_deploy.errors import DependencyError
from kne_deploy.execer import Execer, PathResolver, look_path


class KindSpec(ComponentSpec):
    """Creates (or reuses) a kind cluster and prepares its nodes.

    Args:
        cfg: kind cluster configuration.
        execer: Command executor.
        path_resolver: Resolves CLI tools on PATH.
        docker_config: Local docker credentials copied onto each node.
    """

    config_model = KindConfig
    name = "kind"

    def __init__(
        self,
        cfg: KindConfig,
        execer: Execer | None = None,
        path_resolver: PathResolver = look_path,
        docker_config: Path = DOCKER_CONFIG_PATH,
    ) -> None:
        super().__init__(cfg, execer, path_resolver)
        self.cfg: KindConfig = cfg
        self._docker_config = docker_config

    def deploy(self, ctx: Context) -> None:
        try:
            self._look_path(KIND_CMD)
        except LookupError as err:
            raise DependencyError(KIND_CMD) from err

        console.print(Panel.fit(f"Creating kind cluster '{self.cfg.name}'", style="bold blue"))
        if self.cfg.recycle and self._cluster_exists():
            console.print(f"[yellow]   Reusing existing cluster '{self.cfg.name}'[/yellow]")
        else:
            self._run("failed to create cluster", KIND_CMD, *self._create_args())
            console.print("[green]✅ Cluster created successfully[/green]")

        for registry in self.cfg.google_artifact_registries:
            self._setup_registry_access(registry)
        self._load_images()
        for manifest in self.cfg.additional_manifests:
            self._apply_file("failed to deploy manifest", manifest)
        self._mark_deployed()

    def healthy(self, ctx: Context) -> None:
        """kind waits for the control plane itself; only the context is checked."""
        self._require_deployed()
        err = ctx.error()
        if err is not None:
            raise err

    def _cluster_exists(self) -> bool:
        out = self._run("failed to get clusters", KIND_CMD, "get", "clusters")
        return self.cfg.name in out.split()

    def _create_args(self) -> list[str]:
        args = ["create", "cluster", "--name", self.cfg.name]
        if self.cfg.image:
            args += ["--image", self.cfg.image]
        if self.cfg.retain:
            args.append("--retain")
        if self.cfg.wait:
            args += ["--wait", self.cfg.wait]
        if self.cfg.kubecfg:
            args += ["--kubeconfig", str(self.cfg.kubecfg)]
        if self.cfg.config_file:
            args += ["--config", str(self.cfg.config_file)]
        return args

    def _setup_registry_access(self, registry: str) -> None:
        """Log in to an Artifact Registry host and hand the credentials to every node."""
        console.print(f"[yellow]ℹ️  Setting up access to {registry}...[/yellow]")
        token = self._run("failed to get access token", GCLOUD_CMD, "auth", "print-access-token").strip()
        self._run(
            "failed to login to docker",
            DOCKER_CMD, "login", "-u", GAR_LOGIN_USER, "--password", token, f"https://{registry}",
        )
        nodes = self._run("failed to get nodes", KIND_CMD, "get", "nodes", "--name", self.cfg.name).split()
        for node in nodes:
            self._run(
                "failed to cp config to node",
                DOCKER_CMD, "cp", str(self._docker_config), f"{node}:{NODE_KUBELET_CONFIG}",
            )
            self._run("failed to restart kubelet", DOCKER_CMD, "exec", node, "systemctl", "restart", "kubelet")
        console.print(f"[green]✅ {len(nodes)} nodes can pull from {registry}[/green]")

    def _load_images(self) -> None:
        """Pull, retag, and load each configured image into the cluster nodes."""
        if not self.cfg.container_images:
            return
        console.print(f"[yellow]Loading {len(self.cfg.container_images)} images into the cluster...[/yellow]")
        for dst, src in self.cfg.container_images.items():
            logger.info("Loading %s as %s", src, dst)
            self._run("failed to pull", DOCKER_CMD, "pull", src)
            self._run("failed to tag", DOCKER_CMD, "tag", src, dst)
            self._run("failed to load", KIND_CMD, "load", "docker-image", dst, "--name", self.cfg.name)
            console.print(f"[green]✓ {dst}[/green]")
