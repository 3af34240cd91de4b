"""Host discovery components.

This package provides the pieces of an ARP sweep: the wire codec, the
discovered-host registry, local interface resolution, the link-layer
channel and the scan orchestrator.

Modules:
    codec: Ethernet/ARP frame encoding and decoding
    registry: Thread-safe discovered-host registry
    interface: Local interface and address resolution (psutil)
    channel: Raw frame channel (scapy)
    scanner: Send/listen orchestration
    report: Result formatting

Example:
    >>> from discovery import HostRegistry
    >>> registry = HostRegistry()
    >>> registry.insert_if_absent("10.0.0.1", "AA:BB:CC:DD:EE:01")
    True
"""
from .codec import decode, encode_request, format_mac, normalize_mac
from .interface import InterfaceInfo, find_interface, get_local_ip, resolve_interface
from .registry import DiscoveredHost, HostRegistry

__all__ = [
    # Codec
    "encode_request",
    "decode",
    "normalize_mac",
    "format_mac",
    # Registry
    "DiscoveredHost",
    "HostRegistry",
    # Interface
    "InterfaceInfo",
    "get_local_ip",
    "find_interface",
    "resolve_interface",
]
