"""ARP sweep of a local IPv4 subnet.

The scan runs two threads: the caller's thread transmits one broadcast
request per address in the target range, while a listener thread reads
replies for a fixed window and records them in a ``HostRegistry``.

Timing model (see ``config.constants``):
1. The listener reads for a fixed window (2s, or 0.5s in fast mode),
   each read bounded by a short timeout (10ms / 5ms).
2. After the window it performs a fixed number of extra reads (10 / 5)
   to pick up replies that arrive just after the window closes.
3. Requests go out in batches of 32 with a 100us pause between batches.

There is no early exit: the listener always runs its full window.
"""

from __future__ import annotations

import ipaddress
import itertools
import logging
import threading
import time
from typing import Dict, Iterable, Iterator, List, Optional, Set

from config import SCAN, LogContext, ScanTiming, get_logger, timing_for
from config.exceptions import InventoryFileError, SetupError
from discovery.channel import FrameChannel
from discovery.codec import decode, encode_request
from discovery.interface import InterfaceInfo
from discovery.registry import DiscoveredHost, HostRegistry
from storage.label_store import LabelEntry, LabelStore

logger = get_logger(__name__)

# Extra time allowed for the listener thread to finish beyond its own bound
JOIN_GRACE_SECONDS = 1.0


def parse_range(text: str) -> ipaddress.IPv4Network:
    """Parse an explicit scan range such as ``192.168.1.0/24``.

    Host bits are allowed (``192.168.1.7/24`` is the same /24), and a bare
    address is a single-address range.

    Raises:
        SetupError: On invalid syntax or a non-IPv4 range.
    """
    try:
        network = ipaddress.ip_network(text.strip(), strict=False)
    except ValueError as e:
        raise SetupError(f"Invalid IP range: {e}", {"range": text}) from e
    if not isinstance(network, ipaddress.IPv4Network):
        raise SetupError("Only IPv4 networks are supported", {"range": text})
    return network


def _batched(frames: Iterable[bytes], size: int) -> Iterator[List[bytes]]:
    frames = iter(frames)
    while True:
        batch = list(itertools.islice(frames, size))
        if not batch:
            return
        yield batch


class ArpScanner:
    """Sends ARP requests across a range and collects the replies.

    Example:
        >>> with open_channel(interface.name) as channel:
        ...     scanner = ArpScanner(interface, channel, fast_mode=True)
        ...     for host in scanner.scan():
        ...         print(host.address, host.mac_address)
    """

    def __init__(
        self,
        interface: InterfaceInfo,
        channel: FrameChannel,
        fast_mode: bool = False,
        custom_range: Optional[ipaddress.IPv4Network] = None,
        label_store: Optional[LabelStore] = None,
        labels: Optional[Dict[str, LabelEntry]] = None,
    ):
        self.interface = interface
        self.channel = channel
        self.fast_mode = fast_mode
        self.custom_range = custom_range
        self.label_store = label_store
        self.labels = labels if labels is not None else {}
        self.timing: ScanTiming = timing_for(fast_mode)
        self.registry = HostRegistry()
        if fast_mode:
            logger.info("Fast mode enabled - using shorter timeouts")

    def resolve_range(self) -> ipaddress.IPv4Network:
        """The explicit range if one was given, else the local prefix."""
        if self.custom_range is not None:
            logger.info(f"Using custom network range: {self.custom_range}")
            return self.custom_range
        network = self.interface.network
        logger.info(f"Auto-detected network: {network}")
        return network

    def build_requests(self, network: ipaddress.IPv4Network) -> Iterator[bytes]:
        """One request frame per address, network and broadcast included.

        Frames are encoded as they are consumed.
        """
        mac = self.interface.mac_address
        if not mac:
            raise SetupError("No MAC address found for interface",
                             {"interface": self.interface.name})
        return (encode_request(mac, self.interface.local_ip, target) for target in network)

    def scan(self) -> List[DiscoveredHost]:
        """Run the full send/listen cycle.

        Returns:
            Discovered hosts in ascending address order, including the
            local machine.
        """
        network = self.resolve_range()
        frames = self.build_requests(network)

        local_mac = self.interface.mac_address
        self.registry.insert_if_absent(self.interface.local_ip, local_mac)
        logger.info(f"Local machine: {self.interface.local_ip} (MAC: {local_mac})")

        listener = threading.Thread(target=self._listen, name="arp-listener", daemon=True)
        listener.start()

        try:
            with LogContext(logger, f"Sending {network.num_addresses} ARP requests", level=logging.INFO):
                self._send_all(frames)
        finally:
            listener.join(timeout=self._join_timeout())
            if listener.is_alive():
                logger.warning("Listener did not finish within its time bound")

        hosts = self.registry.snapshot()
        logger.info(f"Scan complete: {len(hosts)} hosts discovered in {network}")

        if self.label_store is not None:
            self._populate_labels(hosts)
        return hosts

    def _join_timeout(self) -> float:
        timing = self.timing
        return (timing.LISTEN_WINDOW_SECONDS
                + timing.DRAIN_READS * timing.READ_TIMEOUT_SECONDS
                + JOIN_GRACE_SECONDS)

    def _send_all(self, frames: Iterable[bytes]) -> None:
        for batch in _batched(frames, SCAN.BATCH_SIZE):
            for frame in batch:
                self.channel.send(frame)
            time.sleep(SCAN.BATCH_PAUSE_SECONDS)

    def _listen(self) -> None:
        """Read replies for the fixed window, then drain a few more reads."""
        timing = self.timing
        logger.debug("Started listening for responses...")
        deadline = time.monotonic() + timing.LISTEN_WINDOW_SECONDS

        while time.monotonic() < deadline:
            self._read_once(timing.READ_TIMEOUT_SECONDS)

        for _ in range(timing.DRAIN_READS):
            self._read_once(timing.READ_TIMEOUT_SECONDS)
        logger.debug("Listener finished")

    def _read_once(self, timeout: float) -> None:
        try:
            raw = self.channel.receive(timeout)
        except OSError as e:
            logger.debug(f"Frame read failed: {e}")
            return
        if raw:
            self.process_frame(raw)

    def process_frame(self, raw: bytes) -> bool:
        """Record the sender of an ARP reply. Returns True for a new host."""
        reply = decode(raw)
        if reply is None:
            return False
        address, mac = reply
        if self.registry.insert_if_absent(address, mac):
            logger.info(f"Host {address} is up (MAC: {mac})")
            return True
        return False

    def _populate_labels(self, hosts: List[DiscoveredHost]) -> None:
        """Add placeholder label lines for replying hosts not yet labeled."""
        seen: Set[str] = set(self.labels)
        for host in hosts:
            if host.address == self.interface.local_ip:
                continue
            if host.mac_address in seen:
                continue
            seen.add(host.mac_address)
            try:
                self.label_store.ensure_entry(host.mac_address)
            except InventoryFileError as e:
                logger.warning(f"Failed to update {self.label_store.path}: {e}")
