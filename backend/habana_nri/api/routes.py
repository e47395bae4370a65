import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import Settings, get_settings
from ..core.errors import InjectionError
from ..services.devices import fake_device_mode
from ..services.injector import create_container, synchronize
from ..utils.hardware import DeviceCatalog, FilesystemProbe, HostProbe
from .schemas import (
    CreateContainerRequest,
    CreateContainerResponse,
    HealthResponse,
    SynchronizeRequest,
    SynchronizeResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_probe() -> FilesystemProbe:
    return HostProbe()


def get_catalog(probe: FilesystemProbe = Depends(get_probe)) -> DeviceCatalog:
    return DeviceCatalog(probe)


@router.get("/health", response_model=HealthResponse)
def healthcheck(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(runtime_mode=settings.runtime_mode, fake_device=fake_device_mode())


@router.post("/synchronize", response_model=SynchronizeResponse)
def synchronize_pods(payload: SynchronizeRequest) -> SynchronizeResponse:
    return SynchronizeResponse(updates=synchronize(payload.pods, payload.containers))


@router.post("/containers/create", response_model=CreateContainerResponse)
def create_container_adjustment(
    payload: CreateContainerRequest,
    settings: Settings = Depends(get_settings),
    catalog: DeviceCatalog = Depends(get_catalog),
    probe: FilesystemProbe = Depends(get_probe),
) -> CreateContainerResponse:
    try:
        adjustment = create_container(payload.pod, payload.container, settings, catalog=catalog, probe=probe)
    except InjectionError as exc:
        logger.error("CreateContainer %s/%s failed: %s", payload.pod.name, payload.container.name, exc)
        adjustment = exc.adjustment.model_dump() if exc.adjustment is not None else None
        raise HTTPException(status_code=500, detail={"error": str(exc), "adjustment": adjustment}) from exc
    return CreateContainerResponse(adjustment=adjustment)
