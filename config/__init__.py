"""Configuration module for ARP Scan.

Provides centralized configuration, logging and exceptions.
"""
from config.constants import (
    CHANNEL,
    HOSTS,
    SCAN,
    STORAGE,
    TIMING_FAST,
    TIMING_NORMAL,
    ChannelConfig,
    HostsConfig,
    ScanConfig,
    ScanTiming,
    StorageConfig,
    default_hosts_path,
    timing_for,
)
from config.exceptions import (
    ArpScanError,
    ChannelError,
    FrameDecodeError,
    HostsFileError,
    InventoryFileError,
    SetupError,
)
from config.logging_config import LogContext, get_logger, setup_logging

__all__ = [
    # Constants
    "SCAN",
    "STORAGE",
    "HOSTS",
    "CHANNEL",
    "TIMING_FAST",
    "TIMING_NORMAL",
    "ScanConfig",
    "ScanTiming",
    "StorageConfig",
    "HostsConfig",
    "ChannelConfig",
    "timing_for",
    "default_hosts_path",
    # Exceptions
    "ArpScanError",
    "SetupError",
    "ChannelError",
    "FrameDecodeError",
    "InventoryFileError",
    "HostsFileError",
    # Logging
    "setup_logging",
    "get_logger",
    "LogContext",
]
