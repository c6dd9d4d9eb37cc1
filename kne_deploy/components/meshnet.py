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

"""meshnet CNI daemon that wires pod interfaces together."""

from __future__ import annotations

from rich.panel import Panel

from kne_deploy import console
from kne_deploy.components.base import ComponentSpec
from kne_deploy.config import MeshnetConfig
from kne_deploy.constants import MESHNET_DAEMON_SET, NS_MESHNET
from kne_deploy.context import Context
from kne_deploy.kube import Kind
from kne_deploy.readiness import wait_ready


class MeshnetSpec(ComponentSpec):
    config_model = MeshnetConfig
    name = "meshnet"

    def deploy(self, ctx: Context) -> None:
        console.print(Panel.fit("Deploying meshnet", style="bold blue"))
        self._apply_kustomize("failed to deploy meshnet", self.cfg.manifest_dir)
        self._mark_deployed()

    def healthy(self, ctx: Context) -> None:
        self._require_deployed()
        console.print("[yellow]ℹ️  Waiting for meshnet daemon set to be ready...[/yellow]")
        wait_ready(ctx, self.kube, Kind.DAEMON_SET, NS_MESHNET, MESHNET_DAEMON_SET)
        console.print("[green]✅ meshnet is ready[/green]")
