"""Local interface resolution using psutil.

Finds the primary local IPv4 address and the interface that carries it,
along with that interface's hardware address and assigned prefixes.

Example:
    >>> iface = resolve_interface()
    >>> print(iface.name, iface.mac_address, iface.network)
"""

from __future__ import annotations

import ipaddress
import socket
from dataclasses import dataclass, field
from typing import List, Optional

import psutil

from config import CHANNEL, get_logger
from config.exceptions import SetupError
from discovery.codec import normalize_mac

logger = get_logger(__name__)


@dataclass
class InterfaceInfo:
    """The interface a scan runs on.

    Attributes:
        name: OS interface name (e.g. ``eth0``, ``en0``).
        mac_address: Canonical uppercase hardware address.
        local_ip: The local address selected for scanning.
        addresses: Every IPv4 address/prefix assigned to the interface.
    """

    name: str
    mac_address: Optional[str]
    local_ip: ipaddress.IPv4Address
    addresses: List[ipaddress.IPv4Interface] = field(default_factory=list)

    @property
    def network(self) -> ipaddress.IPv4Network:
        """The prefix containing the local address."""
        for assigned in self.addresses:
            if assigned.ip == self.local_ip:
                return assigned.network
        raise SetupError("Failed to find network", {"interface": self.name,
                                                    "address": str(self.local_ip)})


def get_local_ip() -> ipaddress.IPv4Address:
    """Determine the primary local IPv4 address.

    Connecting a UDP socket only selects a route; no packet leaves the host.

    Raises:
        SetupError: If no route exists or the address is not IPv4.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect((CHANNEL.ROUTE_PROBE_HOST, CHANNEL.ROUTE_PROBE_PORT))
            address = sock.getsockname()[0]
    except OSError as e:
        raise SetupError(f"Could not determine local IP address: {e}") from e

    ip = ipaddress.ip_address(address)
    if not isinstance(ip, ipaddress.IPv4Address):
        raise SetupError("Local IP is not IPv4", {"address": address})
    return ip


def _to_interface(address: str, netmask: Optional[str]) -> Optional[ipaddress.IPv4Interface]:
    try:
        if netmask:
            return ipaddress.IPv4Interface(f"{address}/{netmask}")
        return ipaddress.IPv4Interface(address)
    except ValueError:
        return None


def find_interface(local_ip: ipaddress.IPv4Address) -> InterfaceInfo:
    """Find the interface carrying ``local_ip``.

    Raises:
        SetupError: If no interface has that address assigned.
    """
    for name, addr_list in psutil.net_if_addrs().items():
        addresses: List[ipaddress.IPv4Interface] = []
        mac = None
        for addr in addr_list:
            if addr.family == socket.AF_INET:
                assigned = _to_interface(addr.address, addr.netmask)
                if assigned is not None:
                    addresses.append(assigned)
            elif addr.family == psutil.AF_LINK:
                mac = normalize_mac(addr.address)

        if any(assigned.ip == local_ip for assigned in addresses):
            logger.debug(f"Interface {name} carries {local_ip} (MAC: {mac})")
            return InterfaceInfo(name=name, mac_address=mac,
                                 local_ip=local_ip, addresses=addresses)

    raise SetupError("Failed to find network interface", {"address": str(local_ip)})


def resolve_interface() -> InterfaceInfo:
    """Resolve the primary local address and its interface."""
    local_ip = get_local_ip()
    logger.info(f"Local IP address: {local_ip}")
    interface = find_interface(local_ip)
    logger.info(f"Using interface: {interface.name}")
    return interface
