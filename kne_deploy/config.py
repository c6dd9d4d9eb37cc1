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

"""Configuration models for the deployment file and process settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from kne_deploy import console
from kne_deploy.constants import (
    DEFAULT_CLUSTER_NAME,
    DEFAULT_HEALTHY_ATTEMPTS,
    DEFAULT_HEALTHY_TIMEOUT_SECONDS,
    DEFAULT_KIND_NETWORK,
    DEFAULT_MANIFEST_ROOT,
    DEFAULT_METALLB_IP_COUNT,
    DEFAULT_POOL_OFFSET,
    HEALTHY_RETRY_WAIT_SECONDS,
)
from kne_deploy.errors import ConfigurationError


# ============================================================================
# Process settings
# ============================================================================

class KneSettings(BaseSettings):
    """Process-wide settings, auto-loaded from KNE_* env vars.

    Attributes:
        kubeconfig: Path to the kubeconfig file, or None for the default.
        healthy_timeout: Seconds to wait for each component to become ready.
        healthy_attempts: Attempts per readiness check when a watch fails.
        healthy_retry_wait: Seconds between readiness attempts.
    """

    model_config = SettingsConfigDict(env_prefix="KNE_", extra="ignore")

    kubeconfig: str | None = None
    healthy_timeout: float = Field(default=DEFAULT_HEALTHY_TIMEOUT_SECONDS, gt=0)
    healthy_attempts: int = Field(default=DEFAULT_HEALTHY_ATTEMPTS, ge=1, le=10)
    healthy_retry_wait: float = Field(default=HEALTHY_RETRY_WAIT_SECONDS, ge=0)


# ============================================================================
# Component configs
# ============================================================================

class _SpecModel(BaseModel):
    """Component config read from YAML; accepts snake_case or camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class KindConfig(_SpecModel):
    """kind cluster configuration.

    Attributes:
        name: Cluster name.
        recycle: Reuse an existing cluster with the same name.
        image: Node image passed to ``kind create cluster --image``.
        retain: Keep node containers when creation fails.
        wait: Wait duration for the control plane (e.g. ``5m``).
        kubecfg: Kubeconfig path to write, or None for the default.
        config_file: kind cluster config file.
        google_artifact_registries: Artifact Registry hosts to give nodes pull access to.
        container_images: Destination tag to source reference, loaded into the nodes.
        additional_manifests: Manifests applied once the cluster is up.
    """

    name: str = DEFAULT_CLUSTER_NAME
    recycle: bool = False
    image: str | None = None
    retain: bool = False
    wait: str | None = Field(default=None, pattern=r"^\d+[smh]?$")
    kubecfg: Path | None = None
    config_file: Path | None = None
    google_artifact_registries: list[str] = Field(default_factory=list)
    container_images: dict[str, str] = Field(default_factory=dict)
    additional_manifests: list[Path] = Field(default_factory=list)


class MetalLBConfig(_SpecModel):
    """MetalLB load-balancer configuration.

    Attributes:
        ip_count: Addresses past the pool start to hand out.
        manifest_dir: Directory holding ``namespace.yaml`` and ``metallb.yaml``.
        network_name: Container network the cluster nodes are attached to.
        pool_offset: Host offset of the first pool address in the subnet.
    """

    ip_count: int = Field(default=DEFAULT_METALLB_IP_COUNT, ge=1)
    manifest_dir: Path = DEFAULT_MANIFEST_ROOT / "metallb"
    network_name: str = DEFAULT_KIND_NETWORK
    pool_offset: int = Field(default=DEFAULT_POOL_OFFSET, ge=1)


class MeshnetConfig(_SpecModel):
    manifest_dir: Path = DEFAULT_MANIFEST_ROOT / "meshnet" / "base"


class IxiaTGImage(_SpecModel):
    name: str
    path: str
    tag: str


class IxiaTGConfigMap(_SpecModel):
    """Release and image references consumed by the Ixia operator."""

    release: str
    images: list[IxiaTGImage] = Field(default_factory=list)


class IxiaTGConfig(_SpecModel):
    """Ixia test-traffic generator operator configuration.

    Attributes:
        manifest_dir: Directory holding the operator manifest and optional config map.
        config_map: Inline release config; overrides the config map file when set.
    """

    manifest_dir: Path = DEFAULT_MANIFEST_ROOT / "keysight"
    config_map: IxiaTGConfigMap | None = None


class SRLinuxConfig(_SpecModel):
    manifest_dir: Path = DEFAULT_MANIFEST_ROOT / "controllers" / "srlinux"


class CEOSLabConfig(_SpecModel):
    manifest_dir: Path = DEFAULT_MANIFEST_ROOT / "controllers" / "ceoslab"


# ============================================================================
# Deployment file
# ============================================================================

class ComponentEntry(BaseModel):
    """One ``{kind, spec}`` block of a deployment file."""

    model_config = ConfigDict(extra="forbid")

    kind: str
    spec: dict[str, Any] = Field(default_factory=dict)


class DeploymentFile(BaseModel):
    """Parsed deployment file.

    Attributes:
        cluster: Cluster provisioner entry.
        ingress: Load-balancer entry.
        cni: Interface-mesh entry.
        controllers: Network-element operator entries, deployed in order.
        base_dir: Directory relative manifest paths are resolved against.
    """

    model_config = ConfigDict(extra="forbid")

    cluster: ComponentEntry
    ingress: ComponentEntry
    cni: ComponentEntry
    controllers: list[ComponentEntry] = Field(default_factory=list)
    base_dir: Path = Path(".")


def load_deployment_file(path: Path) -> DeploymentFile:
    """Read and validate a deployment file.

    Args:
        path: YAML file with ``cluster``, ``ingress``, ``cni`` and ``controllers`` keys.

    Returns:
        The validated deployment description.

    Raises:
        ConfigurationError: If the file is missing, unparsable, or invalid.
    """
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except OSError as err:
        raise ConfigurationError(f"failed to read deployment file {path}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigurationError(f"failed to parse deployment file {path}: {err}") from err
    if not isinstance(raw, dict):
        raise ConfigurationError(f"deployment file {path} must contain a mapping")
    try:
        return DeploymentFile.model_validate({**raw, "base_dir": path.resolve().parent})
    except ValidationError as err:
        raise ConfigurationError(f"invalid deployment file {path}: {err}") from err


# ============================================================================
# Display
# ============================================================================

def display_deployment(dep: DeploymentFile, settings: KneSettings) -> None:
    """Print the components a deployment file will bring up."""
    console.print(Panel.fit("Configuration", style="bold blue"))
    console.print(f"  cluster         : {dep.cluster.kind}")
    console.print(f"  ingress         : {dep.ingress.kind}")
    console.print(f"  cni             : {dep.cni.kind}")
    controllers = ", ".join(c.kind for c in dep.controllers) or "(none)"
    console.print(f"  controllers     : {controllers}")
    console.print(f"  healthy_timeout : {settings.healthy_timeout:g}s")
    console.print(f"  kubeconfig      : {settings.kubeconfig or '(default)'}")
