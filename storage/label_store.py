"""Flat-file inventory of operator-assigned device labels.

One entry per line, ``MAC=LABEL[=HOSTNAME]``:

    40:0D:10:88:92:90=Router=router.local
    00:12:41:89:3F:4C=NAS
    AA:BB:CC:DD:EE:01==

A missing file is an empty inventory. Lines with fewer than two fields are
skipped. When a MAC appears twice the later line wins and a warning is
logged.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from config import STORAGE, get_logger
from config.exceptions import InventoryFileError
from discovery.codec import normalize_mac

logger = get_logger(__name__)


@dataclass(frozen=True)
class LabelEntry:
    """Label (and optional hostname) for one hardware address."""
    mac_address: str
    label: str
    hostname: Optional[str] = None

    def to_line(self) -> str:
        if self.hostname:
            return f"{self.mac_address}={self.label}={self.hostname}"
        return f"{self.mac_address}={self.label}"

    @classmethod
    def from_line(cls, line: str) -> Optional['LabelEntry']:
        """Parse one inventory line; None if it has fewer than two fields."""
        parts = line.split('=')
        if len(parts) < 2:
            return None
        mac = normalize_mac(parts[0])
        if not mac:
            return None
        hostname = parts[2].strip() if len(parts) >= 3 else ""
        return cls(
            mac_address=mac,
            label=parts[1].strip(),
            hostname=hostname or None,
        )


class LabelStore:
    """Reads and self-populates the label inventory file."""

    DEFAULT_PATH = Path(STORAGE.LABELS_FILE)

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else self.DEFAULT_PATH

    def _read_lines(self) -> List[str]:
        if not self.path.exists():
            return []
        try:
            return self.path.read_text(encoding='utf-8').splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise InventoryFileError(f"Could not read {self.path}: {e}",
                                     {"path": str(self.path)}) from e

    def _write_lines(self, lines: Iterable[str]) -> None:
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                for line in lines:
                    f.write(f"{line}\n")
        except OSError as e:
            raise InventoryFileError(f"Could not write {self.path}: {e}",
                                     {"path": str(self.path)}) from e

    def load(self) -> Dict[str, LabelEntry]:
        """Load all entries keyed by uppercase MAC.

        Raises:
            InventoryFileError: If the file exists but cannot be read.
        """
        labels: Dict[str, LabelEntry] = {}
        for number, line in enumerate(self._read_lines(), start=1):
            entry = LabelEntry.from_line(line)
            if entry is None:
                if line.strip():
                    logger.debug(f"Skipping malformed line {number} in {self.path}")
                continue
            if entry.mac_address in labels:
                logger.warning(
                    f"Duplicate label entry for {entry.mac_address} on line {number} "
                    f"of {self.path}; using the later one"
                )
            labels[entry.mac_address] = entry

        logger.debug(f"Loaded {len(labels)} label entries from {self.path}")
        return labels

    def save(self, entries: Iterable[LabelEntry]) -> None:
        """Overwrite the inventory with ``entries``."""
        self._write_lines(entry.to_line() for entry in entries)

    def ensure_entry(self, mac_address: str) -> bool:
        """Append a blank ``MAC==`` line if the MAC has no entry yet.

        The file is re-read first so edits made since ``load()`` survive,
        then rewritten in full. The file is created if it does not exist.

        Returns:
            True if a placeholder was added.

        Raises:
            InventoryFileError: If the file cannot be read or written.
        """
        mac = normalize_mac(mac_address)
        lines = self._read_lines()
        for line in lines:
            entry = LabelEntry.from_line(line)
            if entry is not None and entry.mac_address == mac:
                return False

        lines.append(f"{mac}==")
        self._write_lines(lines)
        logger.info(f"Added placeholder label entry for {mac} to {self.path}")
        return True
