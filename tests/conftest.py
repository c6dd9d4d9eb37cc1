"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest
from fakes import FakeCluster, FakeNetworks
from hypothesis import Verbosity, settings

from kne_deploy.context import Context
from kne_deploy.network import IPAMConfig, NetworkResource

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)
settings.load_profile("default")


@pytest.fixture
def ctx():
    """Background context, canceled when the test ends."""
    with Context.background() as c:
        yield c


@pytest.fixture
def canceled_ctx():
    c = Context.background()
    c.cancel()
    return c


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def kind_networks() -> FakeNetworks:
    """A kind network with one IPv4 and one IPv6 subnet, plus the default bridge."""
    return FakeNetworks([
        NetworkResource("kind", [IPAMConfig("172.18.0.0/16"), IPAMConfig("127::0/64")]),
        NetworkResource("docker", [IPAMConfig("1.1.1.1/16")]),
    ])
