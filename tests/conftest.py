"""Pytest configuration and shared fixtures.

This module provides:
- Common test fixtures for temporary label and hosts files
- Interface and channel fakes for scan tests
- Pytest markers for test categorization (unit, integration, slow)
"""
import ipaddress
import tempfile
import warnings
from pathlib import Path
from typing import Generator

import pytest

from mocks import MockFrameChannel, make_interface

# Filter scapy deprecation warnings raised at import time
warnings.filterwarnings("ignore", category=DeprecationWarning, module="scapy")


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: mark test as a unit test (fast, isolated)")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# =============================================================================
# Directory and Path Fixtures
# =============================================================================


@pytest.fixture
def temp_data_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def labels_path(temp_data_dir: Path) -> Path:
    """Path for a label inventory file (not created)."""
    return temp_data_dir / "labels.txt"


@pytest.fixture
def hosts_path(temp_data_dir: Path) -> Path:
    """Path for a hosts file (not created)."""
    return temp_data_dir / "hosts"


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def sample_labels_text() -> str:
    """Label inventory with a hostname entry, a label-only entry and a blank one."""
    return (
        "AA:BB:CC:DD:EE:FF=Router=router.local\n"
        "00:12:41:89:3f:4c=NAS\n"
        "11:22:33:44:55:66==\n"
    )


@pytest.fixture
def sample_hosts_text() -> str:
    """A typical hosts file with comments, loopback and an IPv6 line."""
    return (
        "# Static host mappings\n"
        "127.0.0.1 localhost\n"
        "::1 localhost ip6-localhost\n"
        "\n"
        "192.168.1.20    printer.local\n"
    )


@pytest.fixture
def populated_labels(labels_path: Path, sample_labels_text: str) -> Path:
    """Write the sample label inventory to disk."""
    labels_path.write_text(sample_labels_text, encoding="utf-8")
    return labels_path


@pytest.fixture
def populated_hosts(hosts_path: Path, sample_hosts_text: str) -> Path:
    """Write the sample hosts file to disk."""
    hosts_path.write_text(sample_hosts_text, encoding="utf-8")
    return hosts_path


# =============================================================================
# Network Fixtures
# =============================================================================


@pytest.fixture
def interface():
    """Local interface 192.168.1.50/24 with a fixed MAC."""
    return make_interface()


@pytest.fixture
def small_network() -> ipaddress.IPv4Network:
    """A /29 so scans enumerate only eight addresses."""
    return ipaddress.IPv4Network("192.168.1.0/29")


@pytest.fixture
def mock_channel() -> MockFrameChannel:
    """Channel that answers for two hosts on the small network."""
    return MockFrameChannel(responders={
        "192.168.1.5": "aa:bb:cc:dd:ee:01",
        "192.168.1.1": "AA:BB:CC:DD:EE:FF",
    })
