"""Thread-safe registry of hosts discovered during one scan."""

from __future__ import annotations

import ipaddress
import threading
from dataclasses import dataclass
from typing import Dict, List, Union


@dataclass(frozen=True)
class DiscoveredHost:
    """An address that answered, with the hardware address it answered from."""
    address: ipaddress.IPv4Address
    mac_address: str


class HostRegistry:
    """Address -> MAC map shared between the sender and the listener.

    The first reply for an address wins; later replies for the same
    address are ignored even if they carry a different MAC.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hosts: Dict[ipaddress.IPv4Address, str] = {}

    def insert_if_absent(self, address: Union[str, ipaddress.IPv4Address],
                         mac_address: str) -> bool:
        """Record a host unless its address is already known.

        Returns:
            True if the host was added, False if the address was present.
        """
        address = ipaddress.IPv4Address(address)
        with self._lock:
            if address in self._hosts:
                return False
            self._hosts[address] = mac_address
            return True

    def snapshot(self) -> List[DiscoveredHost]:
        """All hosts ordered by ascending numeric address."""
        with self._lock:
            items = list(self._hosts.items())
        return [DiscoveredHost(address, mac) for address, mac in sorted(items)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._hosts)

    def __contains__(self, address) -> bool:
        with self._lock:
            return ipaddress.IPv4Address(address) in self._hosts
