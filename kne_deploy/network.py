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

"""Container network introspection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import docker

from kne_deploy.errors import ConfigurationError


@dataclass(frozen=True)
class IPAMConfig:
    """One address-allocation entry of a container network.

    Attributes:
        subnet: Subnet in CIDR notation (IPv4 or IPv6).
        ip_range: Optional allocation sub-range in CIDR notation.
        gateway: Optional gateway address.
    """

    subnet: str
    ip_range: str = ""
    gateway: str = ""


@dataclass(frozen=True)
class NetworkResource:
    name: str
    ipam: list[IPAMConfig] = field(default_factory=list)


class NetworkClient(Protocol):
    def list_networks(self) -> list[NetworkResource]: ...


class DockerNetworkClient:
    """NetworkClient backed by the local Docker daemon."""

    def __init__(self, docker_client: docker.DockerClient | None = None) -> None:
        self._client = docker_client

    def list_networks(self) -> list[NetworkResource]:
        if self._client is None:
            self._client = docker.from_env()
        return [_to_resource(net.name, net.attrs) for net in self._client.networks.list()]


def _to_resource(name: str, attrs: dict) -> NetworkResource:
    configs = (attrs.get("IPAM") or {}).get("Config") or []
    return NetworkResource(
        name=name,
        ipam=[
            IPAMConfig(
                subnet=cfg.get("Subnet", ""),
                ip_range=cfg.get("IPRange", ""),
                gateway=cfg.get("Gateway", ""),
            )
            for cfg in configs
        ],
    )


def find_network(networks: list[NetworkResource], name: str) -> NetworkResource:
    """Return the network called *name*.

    Raises:
        ConfigurationError: If no network has that name.
    """
    for net in networks:
        if net.name == name:
            return net
    raise ConfigurationError(f"failed to find docker network {name!r}")
