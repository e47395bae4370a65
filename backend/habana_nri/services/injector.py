from __future__ import annotations

import logging

from ..api.schemas import Container, ContainerAdjustment, ContainerUpdate, PodSandbox
from ..core.config import RuntimeMode, Settings
from ..core.errors import DeviceResolutionFailed, HookNotFound
from ..utils.hardware import DeviceCatalog, FilesystemProbe, HostProbe
from .adjuster import HookStage, add_devices, add_error_env, add_hook
from .devices import (
    accelerator_devices,
    fake_device_mode,
    is_habana_container,
    requested_device_ids,
    uverbs_devices,
)
from .hooks import resolve_hook_path

logger = logging.getLogger(__name__)


def synchronize(pods: list[PodSandbox], containers: list[Container]) -> list[ContainerUpdate]:
    for pod in pods:
        logger.info("Synchronize pod: %s", pod.name)
    return []


def create_container(
    pod: PodSandbox,
    container: Container,
    settings: Settings,
    catalog: DeviceCatalog | None = None,
    probe: FilesystemProbe | None = None,
    fake: bool | None = None,
) -> ContainerAdjustment:
    """Build the adjustment for a container being created.

    Containers that do not declare HABANA_VISIBLE_DEVICES get an empty
    adjustment unless ``always_mount`` is set. Legacy mode only registers the
    prestart hook; modern mode registers the createRuntime hook and then
    injects the selected accelerator and uverbs nodes.
    """
    logger.info("CreateContainer pod: %s, container: %s", pod.name, container.name)
    probe = probe or HostProbe()
    catalog = catalog or DeviceCatalog(probe)
    if fake is None:
        fake = fake_device_mode()

    adjust = ContainerAdjustment()
    if not settings.always_mount and not is_habana_container(container):
        return adjust

    if settings.runtime_mode is RuntimeMode.LEGACY:
        logger.info("In legacy mode")
        _add_hook(adjust, "prestart", settings, probe)
        return adjust

    _add_hook(adjust, "createRuntime", settings, probe)

    requested = requested_device_ids(container, catalog, fake)
    if not requested:
        logger.info("No habanalabs accelerators found")
        return adjust
    logger.debug("Requested devices: %s", requested)

    if settings.mount_accelerators:
        try:
            add_devices(adjust, accelerator_devices(requested, catalog, fake))
        except DeviceResolutionFailed as exc:
            _annotate(exc, "adding accelerator devices", container, adjust)
            raise

    if settings.mount_uverbs:
        try:
            add_devices(adjust, uverbs_devices(requested, catalog, probe, fake))
        except DeviceResolutionFailed as exc:
            _annotate(exc, "adding uverbs devices", container, adjust)
            raise

    return adjust


def _add_hook(adjust: ContainerAdjustment, stage: HookStage, settings: Settings, probe: FilesystemProbe) -> None:
    try:
        path = resolve_hook_path(settings, probe)
    except HookNotFound as exc:
        exc.operation = f"adding {stage} hook"
        raise
    logger.info("Hook binary path: %s", path)
    add_hook(adjust, stage, path)


def _annotate(exc: DeviceResolutionFailed, operation: str, container: Container, adjust: ContainerAdjustment) -> None:
    add_error_env(container, adjust, exc.message)
    exc.operation = operation
    exc.adjustment = adjust
