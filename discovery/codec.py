"""Ethernet/ARP frame encoding and decoding.

Request frames are 42 bytes: a 14-byte Ethernet II header followed by a
28-byte ARP payload for IPv4 over Ethernet. Field offsets are explicit
``struct`` formats rather than any implicit record layout.

Example:
    >>> frame = encode_request("AA:BB:CC:DD:EE:FF", "192.168.1.10", "192.168.1.1")
    >>> len(frame)
    42
    >>> decode(frame) is None  # a request is not a discovery event
    True
"""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from config.exceptions import FrameDecodeError, SetupError

AddressLike = Union[str, ipaddress.IPv4Address]
MacLike = Union[str, bytes]

ETHERTYPE_IPV4 = 0x0800
ETHERTYPE_ARP = 0x0806
ARP_HTYPE_ETHERNET = 1
ARP_OP_REQUEST = 1
ARP_OP_REPLY = 2

BROADCAST_MAC = b"\xff" * 6
ZERO_MAC = b"\x00" * 6

ETHERNET_HEADER = struct.Struct("!6s6sH")
ARP_PAYLOAD = struct.Struct("!HHBBH6s4s6s4s")

ETHERNET_HEADER_LEN = ETHERNET_HEADER.size  # 14
ARP_PAYLOAD_LEN = ARP_PAYLOAD.size          # 28
FRAME_LEN = ETHERNET_HEADER_LEN + ARP_PAYLOAD_LEN


@dataclass(frozen=True)
class ArpFrame:
    """Parsed Ethernet + ARP frame."""
    eth_destination: bytes
    eth_source: bytes
    ethertype: int
    hardware_type: int
    protocol_type: int
    hardware_length: int
    protocol_length: int
    operation: int
    sender_mac: bytes
    sender_ip: ipaddress.IPv4Address
    target_mac: bytes
    target_ip: ipaddress.IPv4Address


def normalize_mac(mac_address: str) -> str:
    """Normalize a MAC address to uppercase colon-separated form.

    Handles lowercase, dash separators and octets missing a leading zero.
    """
    mac = mac_address.strip().upper().replace('-', ':')
    parts = mac.split(':')
    if len(parts) == 6:
        mac = ':'.join(part.zfill(2) for part in parts)
    return mac


def format_mac(raw: bytes) -> str:
    """Render six raw bytes as ``AA:BB:CC:DD:EE:FF``."""
    return ':'.join(f"{octet:02X}" for octet in raw)


def mac_to_bytes(mac: MacLike) -> bytes:
    """Convert a textual or raw hardware address to six bytes."""
    if isinstance(mac, (bytes, bytearray)):
        raw = bytes(mac)
    else:
        try:
            raw = bytes(int(part, 16) for part in normalize_mac(mac).split(':'))
        except ValueError as e:
            raise SetupError(f"Invalid hardware address: {mac}") from e
    if len(raw) != 6:
        raise SetupError(f"Hardware address must be 6 bytes, got {len(raw)}")
    return raw


def _ipv4(address: AddressLike, role: str) -> ipaddress.IPv4Address:
    try:
        ip = ipaddress.ip_address(address)
    except ValueError as e:
        raise SetupError(f"Invalid {role} address: {address}") from e
    if not isinstance(ip, ipaddress.IPv4Address):
        raise SetupError(f"{role.capitalize()} address is not IPv4", {"address": str(ip)})
    return ip


def encode_request(source_mac: MacLike, source_ip: AddressLike,
                   target_ip: AddressLike) -> bytes:
    """Build a broadcast ARP "who-has" request.

    Args:
        source_mac: Hardware address of the sending interface.
        source_ip: IPv4 address of the sending interface.
        target_ip: IPv4 address being resolved.

    Returns:
        The 42-byte frame.

    Raises:
        SetupError: If either address is not IPv4.
    """
    sender_mac = mac_to_bytes(source_mac)
    sender_ip = _ipv4(source_ip, "source")
    target = _ipv4(target_ip, "target")

    header = ETHERNET_HEADER.pack(BROADCAST_MAC, sender_mac, ETHERTYPE_ARP)
    payload = ARP_PAYLOAD.pack(
        ARP_HTYPE_ETHERNET,
        ETHERTYPE_IPV4,
        6,
        4,
        ARP_OP_REQUEST,
        sender_mac,
        sender_ip.packed,
        ZERO_MAC,
        target.packed,
    )
    return header + payload


def parse_frame(raw: bytes) -> ArpFrame:
    """Strictly parse an Ethernet frame carrying ARP.

    Raises:
        FrameDecodeError: If the frame is truncated or not ARP.
    """
    if raw is None or len(raw) < FRAME_LEN:
        raise FrameDecodeError("Frame too short", {"length": 0 if raw is None else len(raw)})

    destination, source, ethertype = ETHERNET_HEADER.unpack_from(raw, 0)
    if ethertype != ETHERTYPE_ARP:
        raise FrameDecodeError("Not an ARP frame", {"ethertype": hex(ethertype)})

    (htype, ptype, hlen, plen, operation,
     sha, spa, tha, tpa) = ARP_PAYLOAD.unpack_from(raw, ETHERNET_HEADER_LEN)

    return ArpFrame(
        eth_destination=destination,
        eth_source=source,
        ethertype=ethertype,
        hardware_type=htype,
        protocol_type=ptype,
        hardware_length=hlen,
        protocol_length=plen,
        operation=operation,
        sender_mac=sha,
        sender_ip=ipaddress.IPv4Address(spa),
        target_mac=tha,
        target_ip=ipaddress.IPv4Address(tpa),
    )


def decode(raw: bytes) -> Optional[Tuple[ipaddress.IPv4Address, str]]:
    """Extract ``(sender address, sender MAC)`` from an ARP reply.

    Anything else (short frames, other ethertypes, requests) yields None.
    """
    try:
        frame = parse_frame(raw)
    except FrameDecodeError:
        return None
    if frame.operation != ARP_OP_REPLY:
        return None
    return frame.sender_ip, format_mac(frame.sender_mac)
