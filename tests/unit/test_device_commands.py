"""Test the provisioning command set on NetcfgDevice."""

from __future__ import annotations

import asyncio

import pytest

from netcfg_ble import NetcfgDevice
from netcfg_ble.exceptions import (
    AdapterNotFoundError,
    BLEWriteError,
    NotConnectedError,
    PayloadTooLargeError,
)
from netcfg_ble.models.enums import ConnectionState
from netcfg_ble.protocol import Opcode, decode_opcode, encode, reassemble_payload

DEVICE_ID = "AA:BB:CC:DD:EE:FF"


def _messages(packets: list[bytes]) -> list[list[bytes]]:
    """Group a flat packet log back into messages."""
    messages: list[list[bytes]] = []
    for packet in packets:
        if packet[0] == 1:
            messages.append([])
        messages[-1].append(packet)
    return messages


@pytest.fixture
def device(transport, events, fast_config) -> NetcfgDevice:
    return NetcfgDevice(status_callback=events.append, config=fast_config, transport=transport)


class TestSingleCommands:
    """Test each command's wire output and preconditions."""

    @pytest.mark.asyncio
    async def test_send_start(self, device, transport) -> None:
        await device.connect(DEVICE_ID)

        await device.send_start()

        assert transport.written_packets == encode(Opcode.START)
        await device.disconnect()

    @pytest.mark.asyncio
    async def test_send_ssid_and_password(self, device, transport) -> None:
        await device.connect(DEVICE_ID)

        await device.send_ssid("Café Wi-Fi")
        await device.send_password(b"secret123")

        ssid_msg, password_msg = _messages(transport.written_packets)
        assert decode_opcode(ssid_msg) == Opcode.SSID
        assert reassemble_payload(ssid_msg) == "Café Wi-Fi".encode("utf-8")
        assert reassemble_payload(password_msg) == b"secret123"
        await device.disconnect()

    @pytest.mark.asyncio
    async def test_send_done_and_reboot(self, device, transport) -> None:
        await device.connect(DEVICE_ID)

        await device.send_done()
        await device.send_reboot()

        assert [decode_opcode(m) for m in _messages(transport.written_packets)] == [
            Opcode.DONE,
            Opcode.REBOOT,
        ]
        await device.disconnect()

    @pytest.mark.asyncio
    async def test_oversized_ssid_rejected_before_any_write(self, device, transport) -> None:
        await device.connect(DEVICE_ID)

        with pytest.raises(PayloadTooLargeError, match="36 bytes"):
            await device.send_ssid("s" * 37)

        assert "write" not in transport.calls
        await device.disconnect()

    @pytest.mark.asyncio
    async def test_limit_counts_bytes_not_characters(self, device, transport) -> None:
        """19 two-byte characters are 38 bytes."""
        await device.connect(DEVICE_ID)

        with pytest.raises(PayloadTooLargeError):
            await device.send_ssid("é" * 19)
        with pytest.raises(PayloadTooLargeError, match="64 bytes"):
            await device.send_password("é" * 33)

        assert transport.writes == []
        await device.disconnect()

    @pytest.mark.asyncio
    async def test_requires_connection(self, device, transport) -> None:
        with pytest.raises(NotConnectedError, match="No device connected"):
            await device.send_start()

    @pytest.mark.asyncio
    async def test_fails_after_link_loss(self, device, transport) -> None:
        await device.connect(DEVICE_ID)
        transport.connected.clear()

        with pytest.raises(NotConnectedError, match="Device is not connected"):
            await device.send_done()
        assert transport.writes == []

    @pytest.mark.asyncio
    async def test_link_loss_resets_state(self, device, transport) -> None:
        await device.connect(DEVICE_ID)

        transport.connected.clear()
        transport.close_stream()
        for _ in range(5):
            await asyncio.sleep(0)

        assert device.state == ConnectionState.DISCONNECTED
        assert not device.is_connected
        assert device.connected_device_id is None
        with pytest.raises(NotConnectedError, match="No device connected"):
            await device.send_start()


class TestConfigure:
    """Test the composite configure sequence."""

    @pytest.mark.asyncio
    async def test_configure_sends_four_messages(self, device, transport) -> None:
        await device.connect(DEVICE_ID)

        await device.configure("MyWifi", "a-rather-long-password-value")

        messages = _messages(transport.written_packets)
        assert [decode_opcode(m) for m in messages] == [
            Opcode.START,
            Opcode.SSID,
            Opcode.PASSWORD,
            Opcode.DONE,
        ]
        assert reassemble_payload(messages[1]) == b"MyWifi"
        assert reassemble_payload(messages[2]) == b"a-rather-long-password-value"
        await device.disconnect()

    @pytest.mark.asyncio
    async def test_configure_validates_before_sending(self, device, transport) -> None:
        await device.connect(DEVICE_ID)

        with pytest.raises(PayloadTooLargeError, match="Password"):
            await device.configure("MyWifi", "p" * 65)

        assert transport.writes == []
        await device.disconnect()

    @pytest.mark.asyncio
    async def test_password_failure_aborts_without_rollback(self, device, transport) -> None:
        """START and SSID go out, PASSWORD fails, DONE is never sent."""
        await device.connect(DEVICE_ID)
        # START: 1 write, SSID: 1 write, PASSWORD: first packet fails 3 times
        transport.write_errors = [None, None] + [BLEWriteError(f"write {i}") for i in range(3)]

        with pytest.raises(BLEWriteError, match="write 2"):
            await device.configure("MyWifi", "secret123")

        messages = _messages(transport.written_packets)
        assert [decode_opcode(m) for m in messages] == [Opcode.START, Opcode.SSID]
        assert transport.calls.count("write") == 5
        await device.disconnect()


class TestLifecycle:
    """Test adapter creation, state and context manager."""

    @pytest.mark.asyncio
    async def test_state_follows_connection(self, device) -> None:
        assert device.state == ConnectionState.DISCONNECTED
        assert device.connected_device_id is None

        await device.connect(DEVICE_ID)
        assert device.is_connected
        assert device.connected_device_id == DEVICE_ID

        await device.disconnect()
        assert device.state == ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_context_manager_disconnects(self, transport, events, fast_config) -> None:
        async with NetcfgDevice(events.append, fast_config, transport=transport) as device:
            await device.connect(DEVICE_ID)

        assert "disconnect" in transport.calls
        assert not device.is_connected

    @pytest.mark.asyncio
    async def test_adapter_created_once(self, transport, fast_config) -> None:
        created = []

        def factory(config):
            created.append(config)
            return transport

        device = NetcfgDevice(config=fast_config, transport_factory=factory)

        await device.scan()
        await device.scan(timeout_ms=0)

        assert created == [fast_config]

    @pytest.mark.asyncio
    async def test_adapter_failure(self, fast_config) -> None:
        def factory(config):
            raise RuntimeError("bluetooth off")

        device = NetcfgDevice(config=fast_config, transport_factory=factory)

        with pytest.raises(AdapterNotFoundError, match="No BLE adapters found"):
            await device.scan()

    @pytest.mark.asyncio
    async def test_disconnect_without_adapter(self, fast_config) -> None:
        device = NetcfgDevice(config=fast_config, transport_factory=lambda config: None)

        with pytest.raises(NotConnectedError):
            await device.disconnect()

    @pytest.mark.asyncio
    async def test_scan_uses_config_timeout(self, device, transport) -> None:
        devices = await device.scan()

        assert [d.id for d in devices] == [DEVICE_ID]
        assert devices[0].matched
