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

"""Shared plumbing for component specs: command steps, manifests, client injection."""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar, Protocol

from pydantic import BaseModel
from rich.panel import Panel

from kne_deploy import console, logger
from kne_deploy.constants import KUBECTL_CMD
from kne_deploy.context import Context
from kne_deploy.errors import DeployError, StepError
from kne_deploy.execer import Execer, PathResolver, default_execer, look_path
from kne_deploy.kube import ClusterClient, Kind
from kne_deploy.readiness import wait_ready


class Component(Protocol):
    """A deployable unit: ``deploy`` provisions it, ``healthy`` blocks until it is ready."""

    name: str

    def deploy(self, ctx: Context) -> None: ...

    def healthy(self, ctx: Context) -> None: ...

    def set_kube_client(self, kube: ClusterClient) -> None: ...


class ComponentSpec:
    """Base for component specs.

    Subclasses set ``config_model`` and implement ``deploy``/``healthy``.
    The executor and path resolver are fixed at construction; the cluster
    client is injected once the cluster exists.
    """

    config_model: ClassVar[type[BaseModel]]
    name: ClassVar[str] = "component"

    def __init__(
        self,
        cfg: BaseModel,
        execer: Execer | None = None,
        path_resolver: PathResolver = look_path,
    ) -> None:
        self.cfg = cfg
        self._execer = execer if execer is not None else default_execer()
        self._look_path = path_resolver
        self._kube: ClusterClient | None = None
        self._deployed = False

    def set_kube_client(self, kube: ClusterClient) -> None:
        self._kube = kube

    @property
    def kube(self) -> ClusterClient:
        if self._kube is None:
            raise DeployError(f"{self.name}: cluster client not set")
        return self._kube

    def _run(self, step: str, cmd: str, *args: str) -> str:
        """Run one command, wrapping any failure with *step*."""
        try:
            return self._execer.exec(cmd, *args)
        except Exception as err:
            raise StepError(step, err) from err

    def _apply_file(self, step: str, manifest: Path) -> None:
        logger.info("Applying %s", manifest)
        self._run(step, KUBECTL_CMD, "apply", "-f", str(manifest))

    def _apply_kustomize(self, step: str, directory: Path) -> None:
        logger.info("Applying kustomization %s", directory)
        self._run(step, KUBECTL_CMD, "apply", "-k", str(directory))

    def _mark_deployed(self) -> None:
        self._deployed = True

    def _require_deployed(self) -> None:
        if not self._deployed:
            raise DeployError(f"{self.name}: healthy called before a successful deploy")


class OperatorSpec(ComponentSpec):
    """A network-element operator: one kustomization plus one controller deployment."""

    namespace: ClassVar[str]
    deployment: ClassVar[str]
    title: ClassVar[str]

    def deploy(self, ctx: Context) -> None:
        console.print(Panel.fit(f"Deploying {self.title} operator", style="bold blue"))
        self._apply_kustomize("failed to apply operator", self.cfg.manifest_dir)
        self._mark_deployed()

    def healthy(self, ctx: Context) -> None:
        self._require_deployed()
        console.print(f"[yellow]ℹ️  Waiting for {self.title} operator to be ready...[/yellow]")
        wait_ready(ctx, self.kube, Kind.DEPLOYMENT, self.namespace, self.deployment)
        console.print(f"[green]✅ {self.title} operator is ready[/green]")
