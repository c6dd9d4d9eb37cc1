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

"""
cli.py - Unified CLI for network emulation cluster provisioning.

Subcommands:
    create     Create infrastructure resources (kind-cluster)
    deploy     Deploy from a deployment file (all, cluster)

Examples:
    # Create a kind cluster named "kne"
    kne-deploy create kind-cluster --name kne

    # Cluster + MetalLB + meshnet + controllers, waiting for each to be ready
    kne-deploy deploy all deploy/kne/kind.yaml

    # Same, with a 10 minute readiness budget per component
    kne-deploy deploy all deploy/kne/kind.yaml --timeout 600

For detailed usage information, run: kne-deploy --help
"""

from __future__ import annotations

import logging
import sys

import typer

from kne_deploy import console
from kne_deploy.commands import create_cmd, deploy_cmd

app = typer.Typer(
    help="Unified CLI for network emulation cluster provisioning.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.add_typer(create_cmd.app, name="create")
app.add_typer(deploy_cmd.app, name="deploy")


def main() -> None:
    try:
        app()
    except Exception as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
