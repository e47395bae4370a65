from __future__ import annotations

import logging
import os
from typing import Mapping

from ..api.schemas import Container
from ..core.errors import DeviceNotFound, DeviceResolutionFailed
from ..utils.hardware import (
    ACCEL_CONTROL_PREFIX,
    ACCEL_PREFIX,
    FAKE_DEVICE_IDS,
    UVERBS_DEV_DIR,
    DeviceCatalog,
    DeviceInfo,
    FilesystemProbe,
    device_ids,
)

ENV_VISIBLE_DEVICES = "HABANA_VISIBLE_DEVICES"
ENV_VISIBLE_MODULES = "HABANA_VISIBLE_MODULES"
ENV_FAKE_DEVICE = "FAKE_DEVICE"

FAKE_UVERBS_DEVICES = [
    "/dev/infiniband/uverbs9",
    "/dev/infiniband/uverbs10",
    "/dev/infiniband/uverbs11",
    "/dev/infiniband/uverbs12",
    "/dev/infiniband/uverbs13",
    "/dev/infiniband/uverbs14",
    "/dev/infiniband/uverbs15",
    "/dev/infiniband/uverbs16",
]

logger = logging.getLogger(__name__)


def fake_device_mode(environ: Mapping[str, str] | None = None) -> bool:
    return ENV_FAKE_DEVICE in (os.environ if environ is None else environ)


def is_habana_container(container: Container) -> bool:
    return any(entry.startswith(ENV_VISIBLE_DEVICES) for entry in container.env)


def visibility_value(container: Container) -> tuple[bool, str | None]:
    """Return whether the container declares the selector, and its value.

    Only the first matching entry counts.
    """
    for entry in container.env:
        if entry.startswith(ENV_VISIBLE_DEVICES):
            _, sep, value = entry.partition("=")
            return True, value if sep else None
    return False, None


def filter_devices_by_env(container: Container, devices: list[str]) -> list[str]:
    found, value = visibility_value(container)
    # absent, valueless or "all" keeps the whole catalog
    if not found or value is None or value == "all":
        return list(devices)

    requested = value.split(",")
    return [dev for dev in devices if dev[-1:] in requested]


def requested_device_ids(container: Container, catalog: DeviceCatalog, fake: bool = False) -> list[str]:
    if fake:
        paths = [f"{ACCEL_PREFIX}{dev_id}" for dev_id in FAKE_DEVICE_IDS]
    else:
        paths = catalog.list_accelerator_paths()
    return device_ids(filter_devices_by_env(container, paths))


def accelerator_devices(requested: list[str], catalog: DeviceCatalog, fake: bool = False) -> list[DeviceInfo]:
    logger.debug("Discovering accelerators")
    devices: list[DeviceInfo] = []
    for dev_id in requested:
        for prefix in (ACCEL_PREFIX, ACCEL_CONTROL_PREFIX):
            logger.info("Adding accelerator device path: %s%s", prefix, dev_id)
            if fake:
                devices.append(catalog.fake_device_info(prefix, dev_id))
                continue
            try:
                devices.append(catalog.device_info(f"{prefix}{dev_id}"))
            except DeviceNotFound as exc:
                raise DeviceResolutionFailed(str(exc)) from exc
    return devices


def uverbs_devices(
    requested: list[str],
    catalog: DeviceCatalog,
    probe: FilesystemProbe,
    fake: bool = False,
) -> list[DeviceInfo]:
    logger.debug("Discovering uverbs")
    devices: list[DeviceInfo] = []
    for index, dev_id in enumerate(requested):
        if fake:
            uverbs_dev = FAKE_UVERBS_DEVICES[index]
        else:
            hlib = f"/sys/class/infiniband/hlib_{dev_id}"
            try:
                entries = probe.list_dir(f"{hlib}/device/infiniband_verbs")
            except OSError as exc:
                logger.error("Reading hlib directory: %s", exc)
                continue
            if not entries:
                logger.debug("No uverbs devices found for %s", hlib)
                continue
            uverbs_dev = f"{UVERBS_DEV_DIR}/{entries[0]}"

        logger.info("Adding uverbs device path: %s", uverbs_dev)
        if fake:
            devices.append(catalog.fake_device_info(uverbs_dev, ""))
            continue
        try:
            devices.append(catalog.device_info(uverbs_dev))
        except DeviceNotFound as exc:
            raise DeviceResolutionFailed(str(exc)) from exc
    return devices
