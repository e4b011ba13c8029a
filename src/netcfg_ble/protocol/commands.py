"""BLE protocol commands for NETCFG provisioning devices."""

from __future__ import annotations

import struct
from enum import IntEnum
from typing import NamedTuple, Sequence

from bleak.uuids import normalize_uuid_16

from ..exceptions import PayloadTooLargeError, ProtocolError


class Opcode(IntEnum):
    """Command opcodes understood by the provisioning firmware."""

    START = 0xA001      # Enter provisioning mode
    SSID = 0xA002       # Push network SSID
    PASSWORD = 0xA003   # Push network password
    DONE = 0xA010       # Commit credentials
    REBOOT = 0xA011     # Reboot the device


# GATT identifiers (16-bit SIG short UUIDs expanded to 128-bit form)
SERVICE_UUID = normalize_uuid_16(0xE402)
WRITE_UUID = normalize_uuid_16(0xE403)
STATUS_UUID = normalize_uuid_16(0xE404)

# Protocol constants
PREFIX_ID = 0x03E4
MTU_SIZE = 20
SEQUENCE_HEADER_SIZE = 3   # [index][total][length]
MESSAGE_HEADER_SIZE = 6    # [prefix:2 LE][opcode:2 LE][payload_length:2 LE]
FIRST_PACKET_DATA_MAX = MTU_SIZE - SEQUENCE_HEADER_SIZE - MESSAGE_HEADER_SIZE  # 11
NEXT_PACKET_DATA_MAX = MTU_SIZE - SEQUENCE_HEADER_SIZE  # 17
MAX_PACKETS = 0xFF
MAX_PAYLOAD_SIZE = FIRST_PACKET_DATA_MAX + (MAX_PACKETS - 1) * NEXT_PACKET_DATA_MAX

# Credential limits, counted in encoded bytes
MAX_SSID_LENGTH = 36
MAX_PASSWORD_LENGTH = 64

_MESSAGE_HEADER = struct.Struct("<HHH")


class PacketHeader(NamedTuple):
    """Sequencing prefix carried by every wire packet."""

    index: int
    total: int
    length: int


def packet_count(payload_length: int) -> int:
    """Number of packets needed to carry a payload of the given length."""
    if payload_length <= FIRST_PACKET_DATA_MAX:
        return 1
    remaining = payload_length - FIRST_PACKET_DATA_MAX
    return 1 + -(-remaining // NEXT_PACKET_DATA_MAX)


def split_payload(payload: bytes) -> list[bytes]:
    """Split a payload into per-packet chunks.

    The first chunk takes up to 11 bytes, every following chunk up to 17.
    An empty payload yields a single empty chunk.
    """
    chunks = [payload[:FIRST_PACKET_DATA_MAX]]
    for offset in range(FIRST_PACKET_DATA_MAX, len(payload), NEXT_PACKET_DATA_MAX):
        chunks.append(payload[offset:offset + NEXT_PACKET_DATA_MAX])
    return chunks


def encode(opcode: Opcode | int, payload: bytes = b"") -> list[bytes]:
    """Frame a command into wire packets.

    Format:
        First packet: [1][total][6 + n][prefix:2][opcode:2][len:2][data:n<=11]
        Next packets: [i][total][n][data:n<=17]
        - Multi-byte header fields are little-endian
        - total is the packet count of the whole message

    Args:
        opcode: Command opcode (16-bit)
        payload: Command payload

    Returns:
        Ordered list of packets, each at most 20 bytes

    Raises:
        ValueError: If opcode is not a 16-bit value
        ProtocolError: If payload does not fit in 255 packets
    """
    if not 0 <= int(opcode) <= 0xFFFF:
        raise ValueError(f"Opcode 0x{int(opcode):X} is not a 16-bit value")

    payload = bytes(payload)
    if len(payload) > MAX_PAYLOAD_SIZE:
        raise ProtocolError(
            f"Payload of {len(payload)} bytes exceeds maximum {MAX_PAYLOAD_SIZE}"
        )

    chunks = split_payload(payload)
    total = len(chunks)

    packets = []
    for index, chunk in enumerate(chunks, start=1):
        if index == 1:
            header = _MESSAGE_HEADER.pack(PREFIX_ID, int(opcode), len(payload))
            body = header + chunk
        else:
            body = chunk
        packets.append(bytes([index, total, len(body)]) + body)

    return packets


def parse_packet_header(packet: bytes) -> PacketHeader:
    """Read the 3-byte sequencing prefix of a wire packet.

    Raises:
        ProtocolError: If the packet is shorter than the prefix
    """
    if len(packet) < SEQUENCE_HEADER_SIZE:
        raise ProtocolError(
            f"Packet too short: {len(packet)} bytes (need at least {SEQUENCE_HEADER_SIZE})"
        )
    return PacketHeader(packet[0], packet[1], packet[2])


def _first_packet_fields(packets: Sequence[bytes]) -> tuple[int, int, int]:
    if not packets:
        raise ProtocolError("No packets to decode")
    first = packets[0]
    if len(first) < SEQUENCE_HEADER_SIZE + MESSAGE_HEADER_SIZE:
        raise ProtocolError(f"First packet too short: {len(first)} bytes")
    return _MESSAGE_HEADER.unpack_from(first, SEQUENCE_HEADER_SIZE)


def decode_opcode(packets: Sequence[bytes]) -> int:
    """Opcode declared in the first packet's message header."""
    return _first_packet_fields(packets)[1]


def decode_total_length(packets: Sequence[bytes]) -> int:
    """Total payload length declared in the first packet's message header."""
    return _first_packet_fields(packets)[2]


def reassemble_payload(packets: Sequence[bytes]) -> bytes:
    """Rebuild the original payload from an ordered packet sequence.

    Raises:
        ProtocolError: If numbering is inconsistent or the length mismatches
    """
    prefix, _, total_length = _first_packet_fields(packets)
    if prefix != PREFIX_ID:
        raise ProtocolError(f"Bad protocol prefix: 0x{prefix:04x}")

    payload = bytearray()
    for position, packet in enumerate(packets, start=1):
        header = parse_packet_header(packet)
        if header.index != position or header.total != len(packets):
            raise ProtocolError(
                f"Packet numbering mismatch: got {header.index}/{header.total}, "
                f"expected {position}/{len(packets)}"
            )
        skip = SEQUENCE_HEADER_SIZE + (MESSAGE_HEADER_SIZE if position == 1 else 0)
        payload.extend(packet[skip:])

    if len(payload) != total_length:
        raise ProtocolError(
            f"Payload length mismatch: header says {total_length}, got {len(payload)}"
        )
    return bytes(payload)


def build_start_command() -> list[bytes]:
    """Build START (0xA001) packets."""
    return encode(Opcode.START)


def build_ssid_command(ssid: bytes) -> list[bytes]:
    """Build SSID (0xA002) packets.

    Raises:
        PayloadTooLargeError: If ssid exceeds MAX_SSID_LENGTH bytes
    """
    if len(ssid) > MAX_SSID_LENGTH:
        raise PayloadTooLargeError(f"SSID length exceeds {MAX_SSID_LENGTH} bytes")
    return encode(Opcode.SSID, ssid)


def build_password_command(password: bytes) -> list[bytes]:
    """Build PASSWORD (0xA003) packets.

    Raises:
        PayloadTooLargeError: If password exceeds MAX_PASSWORD_LENGTH bytes
    """
    if len(password) > MAX_PASSWORD_LENGTH:
        raise PayloadTooLargeError(f"Password length exceeds {MAX_PASSWORD_LENGTH} bytes")
    return encode(Opcode.PASSWORD, password)


def build_done_command() -> list[bytes]:
    """Build DONE (0xA010) packets."""
    return encode(Opcode.DONE)


def build_reboot_command() -> list[bytes]:
    """Build REBOOT (0xA011) packets."""
    return encode(Opcode.REBOOT)
