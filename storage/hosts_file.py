"""Reconcile discovered, labeled hosts into the system hosts file.

Every label entry with a hostname "manages" that hostname, plus the
address its MAC was discovered at. Reconciliation drops existing mapping
lines for managed addresses or hostnames, re-aligns the remaining mapping
lines, and appends fresh ``ADDRESS<tab><tab>HOSTNAME`` lines sorted by
address. Running it twice against the same scan yields the same file.

The rewrite is a plain read-modify-overwrite. Concurrent edits by other
processes are not detected.
"""
from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from config import HOSTS, get_logger
from config.exceptions import HostsFileError
from discovery.codec import normalize_mac
from discovery.registry import DiscoveredHost
from storage.label_store import LabelEntry

logger = get_logger(__name__)


@dataclass(frozen=True)
class HostsEntry:
    """A new mapping line to be written."""
    address: ipaddress.IPv4Address
    hostname: str


@dataclass
class HostsFileUpdate:
    """Planned content of the hosts file after reconciliation."""
    path: Path
    retained_lines: List[str] = field(default_factory=list)
    entries: List[HostsEntry] = field(default_factory=list)
    width: int = HOSTS.MIN_ADDRESS_WIDTH

    @property
    def has_changes(self) -> bool:
        return bool(self.entries)

    def render_entries(self) -> List[str]:
        return [format_mapping(str(entry.address), entry.hostname, self.width)
                for entry in self.entries]

    def render(self) -> str:
        """Full file content: retained lines then new entries."""
        lines = self.retained_lines + self.render_entries()
        return "".join(f"{line}\n" for line in lines)


def format_mapping(address: str, hostname: str, width: int) -> str:
    return f"{address:<{width}}\t\t{hostname}"


def parse_mapping(line: str) -> Optional[Tuple[str, str]]:
    """Split an IP-mapping line into ``(address, hostname)``.

    Returns None for anything whose first token is not an IPv4 address
    or that has no hostname token (comments, blank lines, IPv6 entries).
    """
    parts = line.split()
    if len(parts) < 2:
        return None
    try:
        ipaddress.IPv4Address(parts[0])
    except ValueError:
        return None
    return parts[0], parts[1]


def managed_sets(
    hosts: Iterable[DiscoveredHost],
    labels: Dict[str, LabelEntry],
) -> Tuple[Set[ipaddress.IPv4Address], Set[str]]:
    """Addresses and hostnames whose existing mappings get replaced."""
    hosts = list(hosts)
    hostnames: Set[str] = set()
    addresses: Set[ipaddress.IPv4Address] = set()
    for entry in labels.values():
        if not entry.hostname:
            continue
        hostnames.add(entry.hostname)
        for host in hosts:
            if normalize_mac(host.mac_address) == entry.mac_address:
                addresses.add(host.address)
    return addresses, hostnames


def new_entries(
    hosts: Iterable[DiscoveredHost],
    labels: Dict[str, LabelEntry],
) -> List[HostsEntry]:
    """Mapping lines for every discovered host whose label has a hostname."""
    entries = []
    for host in hosts:
        entry = labels.get(normalize_mac(host.mac_address))
        if entry is not None and entry.hostname:
            entries.append(HostsEntry(host.address, entry.hostname))
    entries.sort(key=lambda e: e.address)
    return entries


class HostsFileReconciler:
    """Plans and applies hosts-file updates.

    Example:
        >>> reconciler = HostsFileReconciler(Path("/etc/hosts"), preview=True)
        >>> update = reconciler.reconcile(hosts, labels)
        >>> print(format_preview(update))
    """

    def __init__(self, path: Path, preview: bool = False):
        self.path = Path(path)
        self.preview = preview

    def _read_lines(self) -> List[str]:
        if not self.path.exists():
            if self.preview:
                return []
            raise HostsFileError("Hosts file not found", {"path": str(self.path)})
        try:
            return self.path.read_text(encoding='utf-8').splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise HostsFileError(f"Could not read hosts file: {e}",
                                 {"path": str(self.path)}) from e

    def plan(self, hosts: Iterable[DiscoveredHost],
             labels: Dict[str, LabelEntry]) -> HostsFileUpdate:
        """Compute the reconciled file without touching disk.

        Raises:
            HostsFileError: If the file is missing (outside preview) or unreadable.
        """
        hosts = list(hosts)
        managed_addresses, managed_hostnames = managed_sets(hosts, labels)

        retained: List[str] = []
        for line in self._read_lines():
            mapping = parse_mapping(line)
            if mapping is not None:
                address, hostname = mapping
                if (ipaddress.IPv4Address(address) in managed_addresses
                        or hostname in managed_hostnames):
                    continue
            retained.append(line)

        entries = new_entries(hosts, labels)

        widths = [len(mapping[0]) for mapping in map(parse_mapping, retained) if mapping]
        widths.extend(len(str(entry.address)) for entry in entries)
        width = max([HOSTS.MIN_ADDRESS_WIDTH] + widths)

        normalized = []
        for line in retained:
            mapping = parse_mapping(line)
            if mapping is not None:
                line = format_mapping(mapping[0], mapping[1], width)
            normalized.append(line)

        return HostsFileUpdate(path=self.path, retained_lines=normalized,
                               entries=entries, width=width)

    def apply(self, update: HostsFileUpdate) -> bool:
        """Write the planned content. Returns True if the file was rewritten."""
        if not update.has_changes or self.preview:
            return False
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                f.write(update.render())
        except OSError as e:
            raise HostsFileError(f"Could not write hosts file: {e}",
                                 {"path": str(self.path)}) from e
        logger.info(f"Updated hosts file with {len(update.entries)} entries")
        return True

    def reconcile(self, hosts: Iterable[DiscoveredHost],
                  labels: Dict[str, LabelEntry]) -> HostsFileUpdate:
        """Plan and, unless previewing, apply the update."""
        update = self.plan(hosts, labels)
        if not update.has_changes:
            logger.info("No hosts file entries to update")
        self.apply(update)
        return update


def format_preview(update: HostsFileUpdate) -> str:
    """Text shown for ``--dummy``: the entries that would be added."""
    if not update.has_changes:
        return "\nNo changes would be made to hosts file."
    lines = ["", "Entries to be added:", HOSTS.PREVIEW_RULE]
    lines.extend(update.render_entries())
    lines.append(HOSTS.PREVIEW_RULE)
    return "\n".join(lines)
