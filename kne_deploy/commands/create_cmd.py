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

"""Create subcommands (kind-cluster)."""

from __future__ import annotations

import typer

from kne_deploy.components import KindSpec
from kne_deploy.config import KindConfig
from kne_deploy.context import Context

app = typer.Typer(help="Create infrastructure resources.")


@app.command("kind-cluster")
def kind_cluster(
    name: str | None = typer.Option(None, "--name", help="kind cluster name"),
    recycle: bool = typer.Option(False, "--recycle", help="Reuse an existing cluster with the same name"),
    image: str | None = typer.Option(None, "--image", help="kind node image"),
    registry: list[str] = typer.Option(
        [], "--gar", help="Artifact Registry host the nodes should pull from (repeatable)"),
) -> None:
    """Create a kind cluster without any components."""
    kind_cfg = KindConfig()
    overrides: dict = {"recycle": recycle}
    if name is not None:
        overrides["name"] = name
    if image is not None:
        overrides["image"] = image
    if registry:
        overrides["google_artifact_registries"] = registry
    kind_cfg = kind_cfg.model_copy(update=overrides)

    with Context.background() as ctx:
        KindSpec(kind_cfg).deploy(ctx)
