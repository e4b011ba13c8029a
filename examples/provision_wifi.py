"""Scan for NETCFG devices and push Wi-Fi credentials.

Usage:
    uv run python examples/provision_wifi.py --scan-only
    uv run python examples/provision_wifi.py --ssid MyWifi --password secret123
    uv run python examples/provision_wifi.py --device AA:BB:CC:DD:EE:FF --ssid MyWifi --password secret123
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime

from netcfg_ble import (
    STATUS_EVENT_CHANNEL,
    DeviceInfo,
    NetcfgDevice,
    NetcfgError,
    StatusCode,
    StatusEvent,
)


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _print_device(device: DeviceInfo) -> None:
    marker = "*" if device.matched else " "
    print(f" {marker} {device.id}  rssi={device.rssi}  {device.name}")


async def provision(args: argparse.Namespace) -> int:
    finished = asyncio.Event()

    def on_status(event: StatusEvent) -> None:
        print(f"[{_timestamp()}] {STATUS_EVENT_CHANNEL}: {event.name} ({event.hex})")
        if event.code in (StatusCode.SUCCESS, StatusCode.ERROR, StatusCode.CERT_ERR):
            finished.set()

    async with NetcfgDevice(status_callback=on_status) as netcfg:
        devices = await netcfg.scan(timeout_ms=args.scan_ms)
        print(f"Found {len(devices)} device(s) (* = provisioning target):")
        for device in devices:
            _print_device(device)

        if args.scan_only:
            return 0

        device_id = args.device
        if device_id is None:
            targets = [device for device in devices if device.matched]
            if not targets:
                print("No provisioning target found")
                return 1
            device_id = targets[0].id

        print(f"Connecting to {device_id}...")
        await netcfg.connect(device_id)
        await netcfg.configure(args.ssid, args.password)
        print("Credentials sent, waiting for status...")

        try:
            await asyncio.wait_for(finished.wait(), timeout=args.wait)
        except asyncio.TimeoutError:
            print(f"No final status within {args.wait:.0f}s")

        if args.reboot:
            await netcfg.send_reboot()

    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Provision Wi-Fi credentials on a NETCFG device over BLE."
    )
    parser.add_argument("--device", help="Device identifier (default: strongest matched device)")
    parser.add_argument("--ssid", help="Network SSID (max 36 bytes)")
    parser.add_argument("--password", default="", help="Network password (max 64 bytes)")
    parser.add_argument(
        "--scan-ms",
        type=int,
        default=3000,
        help="Scan duration in milliseconds. Default: 3000",
    )
    parser.add_argument(
        "--wait",
        type=float,
        default=30.0,
        help="Seconds to wait for SUCCESS/ERROR status. Default: 30",
    )
    parser.add_argument("--reboot", action="store_true", help="Send REBOOT when done.")
    parser.add_argument("--scan-only", action="store_true", help="Only list nearby devices.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args()
    if not args.scan_only and args.ssid is None:
        parser.error("--ssid is required unless --scan-only is given")
    return args


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        raise SystemExit(asyncio.run(provision(args)))
    except NetcfgError as err:
        raise SystemExit(f"Provisioning failed: {err}") from err
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
