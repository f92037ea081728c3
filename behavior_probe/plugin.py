"""
pytest plugin that wires the probe into grading suites.

Load it with ``-p behavior_probe.plugin`` or ``pytest_plugins``. It adds
``--submission`` and ``--probe-config`` options and the ``probe_config``,
``probe`` and ``behavior`` fixtures.
"""

import logging
import sys
from pathlib import Path

import pytest

from .behavior_test import BehaviorTest
from .config_loader import ProbeConfig, load_probe_config
from .probe import ReflectiveProbe

logger = logging.getLogger(__name__)

probe_config_key = pytest.StashKey[ProbeConfig]()
inserted_path_key = pytest.StashKey[str]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("behavior-probe", "reflective probe for grading suites")
    group.addoption(
        "--submission",
        action="store",
        default=None,
        help="Directory holding the submission under test; prepended to sys.path.",
    )
    group.addoption(
        "--probe-config",
        action="store",
        default=None,
        help="YAML file with probe settings.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config_path = config.getoption("--probe-config")
    probe_config = load_probe_config(Path(config_path)) if config_path else ProbeConfig()

    submission = config.getoption("--submission")
    if submission:
        probe_config.submission_path = Path(submission)
    config.stash[probe_config_key] = probe_config

    if probe_config.submission_path is not None:
        path = str(probe_config.submission_path.resolve())
        sys.path.insert(0, path)
        config.stash[inserted_path_key] = path
        logger.debug("Submission path added to sys.path: %s", path)


def pytest_unconfigure(config: pytest.Config) -> None:
    path = config.stash.get(inserted_path_key, None)
    if path is not None and path in sys.path:
        sys.path.remove(path)


def pytest_report_header(config: pytest.Config) -> str | None:
    probe_config = config.stash.get(probe_config_key, None)
    if probe_config is None or probe_config.submission_path is None:
        return None
    return f"submission: {probe_config.submission_path}"


@pytest.fixture(scope="session")
def probe_config(pytestconfig: pytest.Config) -> ProbeConfig:
    """Probe settings from ``--probe-config`` and ``--submission``."""
    return pytestconfig.stash.get(probe_config_key, ProbeConfig())


@pytest.fixture(scope="session")
def probe(probe_config: ProbeConfig) -> ReflectiveProbe:
    return ReflectiveProbe(probe_config)


@pytest.fixture
def behavior(probe: ReflectiveProbe) -> BehaviorTest:
    """A BehaviorTest helper failing the current test on probe failures."""
    return BehaviorTest.with_probe(probe)


@pytest.fixture(autouse=True)
def _configured_behavior_test(request: pytest.FixtureRequest, probe: ReflectiveProbe) -> None:
    # Test classes deriving from BehaviorTest use the configured probe
    if isinstance(request.instance, BehaviorTest):
        request.instance.probe = probe
