"""Raw link-layer frame channel.

The scanner only needs a duplex byte-frame transport: send a frame, and
read one frame with a timeout. ``ScapyFrameChannel`` provides that on top
of scapy's layer-2 socket for the current platform (packet sockets, BPF
or Npcap). Opening one usually requires root/administrator privileges.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from scapy.all import conf

from config import CHANNEL, get_logger
from config.exceptions import ChannelError

logger = get_logger(__name__)


class FrameChannel(ABC):
    """Abstract duplex frame transport.

    ``receive`` must return within roughly ``timeout`` seconds, yielding
    None when nothing arrived.
    """

    @abstractmethod
    def send(self, frame: bytes) -> None:
        """Transmit one complete link-layer frame."""

    @abstractmethod
    def receive(self, timeout: float) -> Optional[bytes]:
        """Return the next frame, or None once ``timeout`` elapses."""

    def close(self) -> None:
        pass

    def __enter__(self) -> "FrameChannel":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class ScapyFrameChannel(FrameChannel):
    """Frame channel backed by ``conf.L2socket``."""

    def __init__(self, interface_name: str):
        self.interface_name = interface_name
        try:
            self._socket = conf.L2socket(iface=interface_name,
                                         promisc=CHANNEL.PROMISCUOUS)
        except (OSError, RuntimeError, ValueError) as e:
            raise ChannelError("Failed to create channel",
                               {"interface": interface_name, "error": str(e)}) from e
        logger.debug(f"Opened layer-2 channel on {interface_name}")

    def send(self, frame: bytes) -> None:
        try:
            self._socket.send(frame)
        except OSError as e:
            raise ChannelError("Failed to send frame",
                               {"interface": self.interface_name, "error": str(e)}) from e

    def receive(self, timeout: float) -> Optional[bytes]:
        ready = self._socket.select([self._socket], timeout)
        if not ready:
            return None
        try:
            _, data, _ = self._socket.recv_raw(CHANNEL.READ_BUFFER_SIZE)
        except OSError as e:
            logger.debug(f"Frame read failed on {self.interface_name}: {e}")
            return None
        return data

    def close(self) -> None:
        try:
            self._socket.close()
        except OSError as e:
            logger.debug(f"Error closing channel on {self.interface_name}: {e}")


def open_channel(interface_name: str) -> FrameChannel:
    """Open the default frame channel on ``interface_name``.

    Raises:
        ChannelError: If the channel cannot be opened.
    """
    return ScapyFrameChannel(interface_name)
