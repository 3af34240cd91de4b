"""Tab-separated, width-aligned scan report.

Example output with labels:
    192.168.0.1    \t40:0D:10:88:92:90\trouter.local\tRouter
    192.168.0.2    \t00:12:41:89:3F:4C\tNAS
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from config import SCAN
from discovery.codec import normalize_mac
from discovery.registry import DiscoveredHost
from storage.label_store import LabelEntry


def format_results(
    hosts: Iterable[DiscoveredHost],
    labels: Optional[Dict[str, LabelEntry]] = None,
) -> List[str]:
    """One line per host: address, MAC, then hostname and label when known.

    Column widths are the widest value seen in this run (at least 15 for
    addresses and 17 for MACs).
    """
    rows = []
    for host in hosts:
        mac = normalize_mac(host.mac_address)
        entry = labels.get(mac) if labels else None
        rows.append((str(host.address), mac, entry))

    ip_width = max([SCAN.MIN_ADDRESS_WIDTH] + [len(ip) for ip, _, _ in rows])
    mac_width = max([SCAN.MIN_MAC_WIDTH] + [len(mac) for _, mac, _ in rows])
    label_width = max([0] + [len(e.label) for _, _, e in rows if e is not None])
    hostname_width = max([0] + [len(e.hostname) for _, _, e in rows
                                if e is not None and e.hostname])

    lines = []
    for ip, mac, entry in rows:
        columns = [f"{ip:<{ip_width}}", f"{mac:<{mac_width}}"]
        if entry is not None:
            if entry.hostname:
                columns.append(f"{entry.hostname:<{hostname_width}}")
            columns.append(f"{entry.label:<{label_width}}")
        lines.append("\t".join(columns).rstrip())
    return lines
