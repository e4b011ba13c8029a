"""BLE protocol implementation."""

from .commands import (
    MAX_PASSWORD_LENGTH,
    MAX_SSID_LENGTH,
    MTU_SIZE,
    PREFIX_ID,
    SERVICE_UUID,
    STATUS_UUID,
    WRITE_UUID,
    Opcode,
    PacketHeader,
    build_done_command,
    build_password_command,
    build_reboot_command,
    build_ssid_command,
    build_start_command,
    decode_opcode,
    decode_total_length,
    encode,
    packet_count,
    parse_packet_header,
    reassemble_payload,
    split_payload,
)
from .responses import (
    decode_notification,
    is_status_characteristic,
    parse_status_notification,
    status_name,
)

__all__ = [
    "Opcode",
    "PacketHeader",
    "SERVICE_UUID",
    "WRITE_UUID",
    "STATUS_UUID",
    "PREFIX_ID",
    "MTU_SIZE",
    "MAX_SSID_LENGTH",
    "MAX_PASSWORD_LENGTH",
    "encode",
    "split_payload",
    "packet_count",
    "parse_packet_header",
    "decode_opcode",
    "decode_total_length",
    "reassemble_payload",
    "build_start_command",
    "build_ssid_command",
    "build_password_command",
    "build_done_command",
    "build_reboot_command",
    "parse_status_notification",
    "decode_notification",
    "is_status_characteristic",
    "status_name",
]
