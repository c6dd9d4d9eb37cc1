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

"""MetalLB layer-2 load balancer with an address pool taken from the node network."""

from __future__ import annotations

import base64
import secrets

import docker
from rich.panel import Panel

from kne_deploy import console, logger
from kne_deploy.components.base import ComponentSpec
from kne_deploy.config import MetalLBConfig
from kne_deploy.constants import (
    METALLB_CONFIG_KEY,
    METALLB_CONFIG_MAP,
    METALLB_CONTROLLER_DEPLOYMENT,
    METALLB_MANIFEST,
    METALLB_MEMBERLIST_SECRET,
    METALLB_NAMESPACE_MANIFEST,
    METALLB_SECRET_KEY,
    METALLB_SECRET_KEY_BYTES,
    NS_METALLB,
)
from kne_deploy.context import Context
from kne_deploy.errors import ConfigurationError, ObjectStoreError
from kne_deploy.execer import Execer, PathResolver, look_path
from kne_deploy.ippool import AddressPool, allocate_pool, first_ipv4_subnet, render_pool_config
from kne_deploy.kube import Kind
from kne_deploy.network import DockerNetworkClient, NetworkClient, find_network
from kne_deploy.readiness import wait_ready


class MetalLBSpec(ComponentSpec):
    """Deploys MetalLB and points its address pool at the cluster's container network.

    Args:
        cfg: MetalLB configuration.
        execer: Command executor.
        path_resolver: Resolves CLI tools on PATH.
        networks: Container network introspection client.
    """

    config_model = MetalLBConfig
    name = "metallb"

    def __init__(
        self,
        cfg: MetalLBConfig,
        execer: Execer | None = None,
        path_resolver: PathResolver = look_path,
        networks: NetworkClient | None = None,
    ) -> None:
        super().__init__(cfg, execer, path_resolver)
        self.cfg: MetalLBConfig = cfg
        self._networks = networks if networks is not None else DockerNetworkClient()
        self.pool: AddressPool | None = None

    def deploy(self, ctx: Context) -> None:
        console.print(Panel.fit("Deploying MetalLB", style="bold blue"))
        self._apply_file("failed to create metallb namespace", self.cfg.manifest_dir / METALLB_NAMESPACE_MANIFEST)
        self._ensure_memberlist_secret()
        self._apply_file("failed to deploy metallb", self.cfg.manifest_dir / METALLB_MANIFEST)
        console.print("[green]✅ MetalLB deployed[/green]")
        self._mark_deployed()

    def _ensure_memberlist_secret(self) -> None:
        """Get the memberlist secret, creating it only if it does not exist."""
        try:
            if self.kube.get_secret(NS_METALLB, METALLB_MEMBERLIST_SECRET) is not None:
                logger.info("Reusing existing %s secret", METALLB_MEMBERLIST_SECRET)
                return
            key = base64.b64encode(secrets.token_bytes(METALLB_SECRET_KEY_BYTES)).decode()
            self.kube.create_secret(NS_METALLB, METALLB_MEMBERLIST_SECRET, {METALLB_SECRET_KEY: key})
        except ObjectStoreError as err:
            raise ObjectStoreError(err.op, f"memberlist secret error: {err}") from err

    def healthy(self, ctx: Context) -> None:
        self._require_deployed()
        err = ctx.error()
        if err is not None:
            raise err
        self.pool = self._allocate_pool()
        console.print(f"[yellow]ℹ️  MetalLB address pool: {self.pool}[/yellow]")
        self.kube.put_config_map(NS_METALLB, METALLB_CONFIG_MAP, {METALLB_CONFIG_KEY: render_pool_config(self.pool)})

        console.print("[yellow]ℹ️  Waiting for MetalLB controller to be ready...[/yellow]")
        wait_ready(ctx, self.kube, Kind.DEPLOYMENT, NS_METALLB, METALLB_CONTROLLER_DEPLOYMENT)
        console.print("[green]✅ MetalLB is ready[/green]")

    def _allocate_pool(self) -> AddressPool:
        try:
            networks = self._networks.list_networks()
        except docker.errors.DockerException as err:
            raise ConfigurationError(f"failed to list docker networks: {err}") from err
        subnet = first_ipv4_subnet(find_network(networks, self.cfg.network_name))
        return allocate_pool(subnet, self.cfg.ip_count, self.cfg.pool_offset)
