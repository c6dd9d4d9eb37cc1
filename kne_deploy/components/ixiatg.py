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

"""Ixia test-traffic generator operator and its release config map."""

from __future__ import annotations

import json
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import yaml
from rich.panel import Panel

from kne_deploy import console, logger
from kne_deploy.components.base import OperatorSpec
from kne_deploy.config import IxiaTGConfig, IxiaTGConfigMap
from kne_deploy.constants import (
    IXIATG_CONFIG_MAP,
    IXIATG_CONFIG_MAP_KEY,
    IXIATG_CONFIG_MAP_MANIFEST,
    IXIATG_DEPLOYMENT,
    IXIATG_OPERATOR_MANIFEST,
    NS_IXIATG,
)
from kne_deploy.context import Context
from kne_deploy.errors import ConfigurationError


def config_map_manifest(cm: IxiaTGConfigMap) -> dict:
    """Build the ConfigMap resource carrying the operator's release and image references.

    Args:
        cm: Release name and image list.

    Returns:
        Kubernetes ConfigMap resource ready for YAML serialization.
    """
    versions = {
        "release": cm.release,
        "images": [img.model_dump() for img in cm.images],
    }
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": IXIATG_CONFIG_MAP, "namespace": NS_IXIATG},
        "data": {IXIATG_CONFIG_MAP_KEY: json.dumps(versions, indent=2)},
    }


class IxiaTGSpec(OperatorSpec):
    config_model = IxiaTGConfig
    name = "ixiatg"
    title = "Ixia"
    namespace = NS_IXIATG
    deployment = IXIATG_DEPLOYMENT

    def deploy(self, ctx: Context) -> None:
        console.print(Panel.fit("Deploying Ixia operator", style="bold blue"))
        cfg: IxiaTGConfig = self.cfg
        self._apply_file("failed to apply operator", cfg.manifest_dir / IXIATG_OPERATOR_MANIFEST)
        with self._config_map_file() as path:
            self._apply_file("failed to apply configmap", path)
        self._mark_deployed()

    @contextmanager
    def _config_map_file(self) -> Iterator[Path]:
        """Yield a manifest path for the release config map.

        An inline ``config_map`` is rendered to a temporary file; otherwise the
        config map file in the manifest directory is used.

        Raises:
            ConfigurationError: If neither source is available.
        """
        cfg: IxiaTGConfig = self.cfg
        if cfg.config_map is None:
            path = cfg.manifest_dir / IXIATG_CONFIG_MAP_MANIFEST
            if not path.exists():
                raise ConfigurationError(f"ixia configmap not found: {path} does not exist")
            yield path
            return

        logger.info("Using inline Ixia release %s", cfg.config_map.release)
        tmp = tempfile.NamedTemporaryFile(delete=False, suffix=".yaml")
        try:
            tmp.write(yaml.safe_dump(config_map_manifest(cfg.config_map), sort_keys=False).encode())
            tmp.flush()
            tmp.close()
            yield Path(tmp.name)
        finally:
            Path(tmp.name).unlink(missing_ok=True)
