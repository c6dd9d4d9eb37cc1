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

"""Deployable component specs, keyed by the ``kind`` used in deployment files."""

from __future__ import annotations

from kne_deploy.components.base import Component, ComponentSpec, OperatorSpec
from kne_deploy.components.ceoslab import CEOSLabSpec
from kne_deploy.components.ixiatg import IxiaTGSpec
from kne_deploy.components.kind import KindSpec
from kne_deploy.components.meshnet import MeshnetSpec
from kne_deploy.components.metallb import MetalLBSpec
from kne_deploy.components.srlinux import SRLinuxSpec

CLUSTER_KINDS: dict[str, type[ComponentSpec]] = {"Kind": KindSpec}
INGRESS_KINDS: dict[str, type[ComponentSpec]] = {"MetalLB": MetalLBSpec}
CNI_KINDS: dict[str, type[ComponentSpec]] = {"Meshnet": MeshnetSpec}
CONTROLLER_KINDS: dict[str, type[ComponentSpec]] = {
    "IxiaTG": IxiaTGSpec,
    "SRLinux": SRLinuxSpec,
    "CEOSLab": CEOSLabSpec,
}

__all__ = [
    "CEOSLabSpec",
    "CLUSTER_KINDS",
    "CNI_KINDS",
    "CONTROLLER_KINDS",
    "Component",
    "ComponentSpec",
    "INGRESS_KINDS",
    "IxiaTGSpec",
    "KindSpec",
    "MeshnetSpec",
    "MetalLBSpec",
    "OperatorSpec",
    "SRLinuxSpec",
]
