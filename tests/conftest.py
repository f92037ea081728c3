"""pytest configuration for Behavior Probe tests."""

import sys
from pathlib import Path

import pytest

from behavior_probe import BehaviorTest, RecordingSink, ReflectiveProbe
from behavior_probe.config_loader import ProbeConfig

pytest_plugins = ["pytester", "behavior_probe.plugin"]

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# The sample submission package "foo" lives in tests/fixtures
sys.path.insert(0, str(FIXTURES_DIR))


@pytest.fixture
def restricted_probe():
    return ReflectiveProbe(ProbeConfig(denied_packages=["foo.restricted"]))


@pytest.fixture
def recording():
    """A BehaviorTest that records failures instead of failing the test."""
    sink = RecordingSink()
    return BehaviorTest.with_probe(ReflectiveProbe(), sink=sink), sink
