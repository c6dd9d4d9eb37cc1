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

"""Deploy subcommands (all, cluster)."""

from __future__ import annotations

from pathlib import Path

import typer

from kne_deploy.config import KneSettings, display_deployment, load_deployment_file
from kne_deploy.context import Context
from kne_deploy.orchestrator import build_deployment

app = typer.Typer(help="Deploy a cluster and its components from a deployment file.")


def _settings(timeout: float | None, attempts: int | None, kubeconfig: str | None) -> KneSettings:
    settings = KneSettings()
    overrides: dict = {}
    if timeout is not None:
        overrides["healthy_timeout"] = timeout
    if attempts is not None:
        overrides["healthy_attempts"] = attempts
    if kubeconfig is not None:
        overrides["kubeconfig"] = kubeconfig
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings


@app.command("all")
def deploy_all(
    config: Path = typer.Argument(..., exists=True, dir_okay=False, help="Deployment file"),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Seconds to wait for each component (overrides KNE_HEALTHY_TIMEOUT)"),
    attempts: int | None = typer.Option(
        None, "--attempts", help="Readiness attempts per component (overrides KNE_HEALTHY_ATTEMPTS)"),
    kubeconfig: str | None = typer.Option(
        None, "--kubeconfig", help="Kubeconfig path (overrides KNE_KUBECONFIG)"),
) -> None:
    """Create the cluster, then deploy and verify ingress, CNI, and controllers."""
    dep_file = load_deployment_file(config)
    settings = _settings(timeout, attempts, kubeconfig)
    display_deployment(dep_file, settings)
    with Context.background() as ctx:
        build_deployment(dep_file, settings).deploy(ctx)


@app.command("cluster")
def deploy_cluster(
    config: Path = typer.Argument(..., exists=True, dir_okay=False, help="Deployment file"),
) -> None:
    """Create only the cluster described by the deployment file."""
    dep_file = load_deployment_file(config)
    with Context.background() as ctx:
        build_deployment(dep_file).deploy_cluster(ctx)
