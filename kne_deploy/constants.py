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

"""Names, namespaces, and defaults for the deployable components."""

from __future__ import annotations

from pathlib import Path

# -- Paths --
DEFAULT_MANIFEST_ROOT = Path("manifests")

# -- CLI tools --
KIND_CMD = "kind"
KUBECTL_CMD = "kubectl"
DOCKER_CMD = "docker"
GCLOUD_CMD = "gcloud"

# -- Kind cluster defaults --
DEFAULT_CLUSTER_NAME = "kne"
GAR_LOGIN_USER = "oauth2accesstoken"
DOCKER_CONFIG_PATH = Path.home() / ".docker" / "config.json"
NODE_KUBELET_CONFIG = "/var/lib/kubelet/config.json"

# -- MetalLB --
NS_METALLB = "metallb-system"
METALLB_CONTROLLER_DEPLOYMENT = "controller"
METALLB_MEMBERLIST_SECRET = "memberlist"
METALLB_SECRET_KEY = "secretkey"
METALLB_SECRET_KEY_BYTES = 128
METALLB_CONFIG_MAP = "config"
METALLB_CONFIG_KEY = "config"
METALLB_NAMESPACE_MANIFEST = "namespace.yaml"
METALLB_MANIFEST = "metallb.yaml"
METALLB_POOL_NAME = "default"
METALLB_POOL_PROTOCOL = "layer2"
DEFAULT_METALLB_IP_COUNT = 100
DEFAULT_POOL_OFFSET = 50
DEFAULT_KIND_NETWORK = "kind"

# -- Meshnet --
NS_MESHNET = "meshnet"
MESHNET_DAEMON_SET = "meshnet"

# -- Ixia test-traffic generator --
NS_IXIATG = "ixiatg-op-system"
IXIATG_DEPLOYMENT = "ixiatg-op-controller-manager"
IXIATG_OPERATOR_MANIFEST = "ixiatg-operator.yaml"
IXIATG_CONFIG_MAP_MANIFEST = "ixiatg-configmap.yaml"
IXIATG_CONFIG_MAP = "ixiatg-release-config"
IXIATG_CONFIG_MAP_KEY = "versions"

# -- Nokia SR Linux controller --
NS_SRLINUX = "srlinux-controller"
SRLINUX_DEPLOYMENT = "srlinux-controller-controller-manager"

# -- Arista cEOSLab operator --
NS_CEOSLAB = "arista-ceoslab-operator-system"
CEOSLAB_DEPLOYMENT = "arista-ceoslab-operator-controller-manager"

# -- Readiness --
WATCH_BUFFER_SIZE = 1
DEFAULT_HEALTHY_TIMEOUT_SECONDS = 300.0
DEFAULT_HEALTHY_ATTEMPTS = 1
HEALTHY_RETRY_WAIT_SECONDS = 2
