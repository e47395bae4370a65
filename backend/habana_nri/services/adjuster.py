from __future__ import annotations

import json
import logging
from typing import Iterable, Literal

from ..api.schemas import Container, ContainerAdjustment, Hook, LinuxDevice
from ..utils.hardware import DeviceInfo
from .hooks import HOOK_BINARY

ENV_RUNTIME_ERROR = "HABANA_RUNTIME_ERROR"

HookStage = Literal["prestart", "createRuntime"]

logger = logging.getLogger(__name__)


def add_hook(adjustment: ContainerAdjustment, stage: HookStage, path: str) -> bool:
    """Append the hook to ``stage`` unless a habana hook is already there.

    Returns False when an existing entry made the call a no-op.
    """
    hooks = adjustment.hooks.prestart if stage == "prestart" else adjustment.hooks.create_runtime
    for hook in hooks:
        if HOOK_BINARY in hook.path:
            logger.info("Existing habana %s hook in OCI spec", stage)
            return False

    hooks.append(Hook(path=path, args=[path, stage]))
    logger.info("%s hook added: %s", stage, path)
    return True


def add_devices(adjustment: ContainerAdjustment, devices: Iterable[DeviceInfo]) -> None:
    current = {dev.path for dev in adjustment.linux.devices}
    for device in devices:
        if device.path in current:
            continue
        adjustment.linux.devices.append(
            LinuxDevice(
                path=device.path,
                type="c",
                major=device.major,
                minor=device.minor,
                file_mode=device.file_mode,
                uid=0,
                gid=0,
            )
        )
        current.add(device.path)
        logger.debug("Added device to spec: %s", device.path)


def add_env(adjustment: ContainerAdjustment, key: str, value: str) -> None:
    adjustment.env[key] = json.dumps(value)


def add_error_env(container: Container, adjustment: ContainerAdjustment, message: str) -> None:
    """Record ``message`` as HABANA_RUNTIME_ERROR, never overwriting an earlier one."""
    if ENV_RUNTIME_ERROR in adjustment.env:
        return
    if any(entry.startswith(ENV_RUNTIME_ERROR) for entry in container.env):
        return
    add_env(adjustment, ENV_RUNTIME_ERROR, message)
