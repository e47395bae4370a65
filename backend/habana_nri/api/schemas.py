from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from ..core.config import RuntimeMode


class HealthResponse(BaseModel):
    status: Literal["ok"] = Field(default="ok")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    runtime_mode: RuntimeMode
    fake_device: bool = Field(default=False)


class PodSandbox(BaseModel):
    id: str = Field(default="")
    name: str
    namespace: str = Field(default="")


class Container(BaseModel):
    id: str = Field(default="")
    name: str
    env: list[str] = Field(default_factory=list, description="Environment entries as NAME=VALUE, in declaration order")


class Hook(BaseModel):
    path: str
    args: list[str] = Field(default_factory=list)


class Hooks(BaseModel):
    prestart: list[Hook] = Field(default_factory=list)
    create_runtime: list[Hook] = Field(default_factory=list)


class LinuxDevice(BaseModel):
    path: str
    type: Literal["c"] = Field(default="c")
    major: int
    minor: int
    file_mode: int
    uid: int = Field(default=0)
    gid: int = Field(default=0)


class LinuxAdjustment(BaseModel):
    devices: list[LinuxDevice] = Field(default_factory=list)


class ContainerAdjustment(BaseModel):
    hooks: Hooks = Field(default_factory=Hooks)
    linux: LinuxAdjustment = Field(default_factory=LinuxAdjustment)
    env: dict[str, str] = Field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (
            self.hooks.prestart or self.hooks.create_runtime or self.linux.devices or self.env
        )


class ContainerUpdate(BaseModel):
    container_id: str


class CreateContainerRequest(BaseModel):
    pod: PodSandbox
    container: Container


class CreateContainerResponse(BaseModel):
    adjustment: ContainerAdjustment
    updates: list[ContainerUpdate] = Field(default_factory=list)


class SynchronizeRequest(BaseModel):
    pods: list[PodSandbox] = Field(default_factory=list)
    containers: list[Container] = Field(default_factory=list)


class SynchronizeResponse(BaseModel):
    updates: list[ContainerUpdate] = Field(default_factory=list)
