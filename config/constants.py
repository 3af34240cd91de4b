"""Centralized constants and configuration for ARP Scan.

This module contains all magic numbers, strings, and configuration values
used by the scanner. Centralizing them keeps the timing model and file
locations in one place.

Usage:
    from config.constants import SCAN, STORAGE, timing_for

    batch = SCAN.BATCH_SIZE
    timing = timing_for(fast=True)
"""
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ScanConfig:
    """Send-phase and reporting constants."""
    # Transmission batching
    BATCH_SIZE: int = 32
    BATCH_PAUSE_SECONDS: float = 0.0001  # 100 microseconds

    # Report column minimums
    MIN_ADDRESS_WIDTH: int = 15   # "255.255.255.255"
    MIN_MAC_WIDTH: int = 17       # "AA:BB:CC:DD:EE:FF"


@dataclass(frozen=True)
class ScanTiming:
    """Listener timing for one scan mode.

    All durations are in seconds.
    """
    LISTEN_WINDOW_SECONDS: float
    READ_TIMEOUT_SECONDS: float
    DRAIN_READS: int


@dataclass(frozen=True)
class StorageConfig:
    """Storage and file-related configuration."""
    DATA_DIR_NAME: str = ".arp-scan"
    LOG_FILE: str = "arp_scan.log"
    LABELS_FILE: str = "labels.txt"

    # Log rotation
    LOG_MAX_BYTES: int = 1_000_000  # 1MB
    LOG_BACKUP_COUNT: int = 3


@dataclass(frozen=True)
class HostsConfig:
    """Hostname-mapping file configuration."""
    WINDOWS_PATH: str = r"C:\Windows\System32\drivers\etc\hosts"
    POSIX_PATH: str = "/etc/hosts"
    MIN_ADDRESS_WIDTH: int = 15
    PREVIEW_RULE: str = "-" * 40


@dataclass(frozen=True)
class ChannelConfig:
    """Link-layer channel configuration."""
    READ_BUFFER_SIZE: int = 4096
    PROMISCUOUS: bool = True
    # Public address used only to pick the outbound route; nothing is sent
    ROUTE_PROBE_HOST: str = "8.8.8.8"
    ROUTE_PROBE_PORT: int = 80


# Global instances - import these
SCAN = ScanConfig()
STORAGE = StorageConfig()
HOSTS = HostsConfig()
CHANNEL = ChannelConfig()

TIMING_NORMAL = ScanTiming(
    LISTEN_WINDOW_SECONDS=2.0,
    READ_TIMEOUT_SECONDS=0.010,
    DRAIN_READS=10,
)
TIMING_FAST = ScanTiming(
    LISTEN_WINDOW_SECONDS=0.5,
    READ_TIMEOUT_SECONDS=0.005,
    DRAIN_READS=5,
)


def timing_for(fast: bool) -> ScanTiming:
    """Return the listener timing for the requested mode."""
    return TIMING_FAST if fast else TIMING_NORMAL


def default_hosts_path() -> Path:
    """Return the platform's hostname-mapping file location."""
    if sys.platform.startswith("win"):
        return Path(HOSTS.WINDOWS_PATH)
    return Path(HOSTS.POSIX_PATH)
