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

"""Load-balancer address pool derivation and rendering."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass

import yaml

from kne_deploy.constants import METALLB_POOL_NAME, METALLB_POOL_PROTOCOL
from kne_deploy.errors import ConfigurationError
from kne_deploy.network import NetworkResource


@dataclass(frozen=True)
class AddressPool:
    start: ipaddress.IPv4Address
    end: ipaddress.IPv4Address

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"

    @classmethod
    def parse(cls, text: str) -> AddressPool:
        """Parse a ``"start - end"`` range string."""
        try:
            start, end = (part.strip() for part in text.split("-", 1))
            return cls(ipaddress.IPv4Address(start), ipaddress.IPv4Address(end))
        except ValueError as err:
            raise ConfigurationError(f"invalid address range {text!r}: {err}") from err


def first_ipv4_subnet(network: NetworkResource) -> ipaddress.IPv4Network:
    """Return the first IPv4 subnet of *network*, skipping IPv6 entries.

    Raises:
        ConfigurationError: If the network has no IPv4 subnet.
    """
    for cfg in network.ipam:
        try:
            subnet = ipaddress.ip_network(cfg.subnet, strict=False)
        except ValueError:
            continue
        if isinstance(subnet, ipaddress.IPv4Network):
            return subnet
    raise ConfigurationError(f"failed to find IPv4 subnet for network {network.name!r}")


def allocate_pool(subnet: ipaddress.IPv4Network, count: int, offset: int = 50) -> AddressPool:
    """Reserve a contiguous host range inside *subnet*.

    The pool starts at host *offset* and ends *count* addresses later, so
    ``172.18.0.0/16`` with a count of 20 yields ``172.18.0.50 - 172.18.0.70``.

    Args:
        subnet: IPv4 subnet to carve the range from.
        count: Number of addresses past the start address.
        offset: Host offset of the first address.

    Returns:
        The allocated range.

    Raises:
        ConfigurationError: If the range does not fit in the subnet's usable hosts.
    """
    if count < 1:
        raise ConfigurationError(f"ip count must be positive, got {count}")
    if offset < 1:
        raise ConfigurationError(f"pool offset must be positive, got {offset}")
    start = subnet.network_address + offset
    last_host = subnet.broadcast_address - 1
    if int(start) + count > int(last_host):
        raise ConfigurationError(
            f"pool of {count} addresses at offset {offset} does not fit in {subnet}"
        )
    return AddressPool(start, start + count)


def render_pool_config(pool: AddressPool, name: str = METALLB_POOL_NAME) -> str:
    """Render the load-balancer config payload for a single layer-2 pool."""
    doc = {
        "address-pools": [
            {
                "name": name,
                "protocol": METALLB_POOL_PROTOCOL,
                "addresses": [str(pool)],
            }
        ]
    }
    return yaml.safe_dump(doc, sort_keys=False, default_flow_style=False)


def parse_pool_config(text: str) -> dict[str, AddressPool]:
    """Parse a rendered config payload back into ``{pool name: range}``."""
    doc = yaml.safe_load(text) or {}
    pools: dict[str, AddressPool] = {}
    for entry in doc.get("address-pools", []):
        addresses = entry.get("addresses") or []
        if not addresses:
            raise ConfigurationError(f"address pool {entry.get('name')!r} has no addresses")
        pools[entry["name"]] = AddressPool.parse(addresses[0])
    return pools
