"""Host probes and the Habana device catalog."""

from __future__ import annotations

import os
import re
import shutil
import stat
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

from ..core.errors import DeviceNotFound

ACCEL_DIR = "/dev/accel"
ACCEL_PREFIX = "/dev/accel/accel"
ACCEL_CONTROL_PREFIX = "/dev/accel/accel_controlD"
UVERBS_DEV_DIR = "/dev/infiniband"

FAKE_DEVICE_IDS = ["0", "1", "2", "3", "4", "5", "6", "7"]

# major numbers handed out to synthesized nodes
_FAKE_MAJORS = {
    ACCEL_PREFIX: 508,
    ACCEL_CONTROL_PREFIX: 508,
}
_FAKE_UVERBS_MAJOR = 231

_ACCEL_NAME = re.compile(r"^accel\d+$")
_TRAILING_DIGITS = re.compile(r"(\d+)$")


@dataclass(frozen=True)
class DeviceInfo:
    path: str
    major: int
    minor: int
    file_mode: int


class FilesystemProbe(Protocol):
    def lookup(self, name: str) -> str | None: ...

    def exists(self, path: str) -> bool: ...

    def stat(self, path: str) -> os.stat_result: ...

    def list_dir(self, path: str) -> list[str]: ...

    def current_executable(self) -> str | None: ...


class HostProbe:
    """Filesystem access against the real host."""

    def lookup(self, name: str) -> str | None:
        return shutil.which(name)

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def stat(self, path: str) -> os.stat_result:
        return os.stat(path)

    def list_dir(self, path: str) -> list[str]:
        return sorted(os.listdir(path))

    def current_executable(self) -> str | None:
        if not sys.argv or not sys.argv[0]:
            return None
        return str(Path(sys.argv[0]).resolve())


class DeviceCatalog:
    """Enumerates accelerator nodes and turns device paths into DeviceInfo."""

    def __init__(self, probe: FilesystemProbe | None = None) -> None:
        self.probe = probe or HostProbe()

    def list_accelerator_paths(self) -> list[str]:
        try:
            names = self.probe.list_dir(ACCEL_DIR)
        except OSError:
            return []
        accels = [name for name in names if _ACCEL_NAME.match(name)]
        accels.sort(key=lambda name: int(name[len("accel"):]))
        return [f"{ACCEL_DIR}/{name}" for name in accels]

    def device_info(self, path: str) -> DeviceInfo:
        try:
            st = self.probe.stat(path)
        except OSError as exc:
            raise DeviceNotFound(path, exc.strerror or str(exc)) from exc
        if not stat.S_ISCHR(st.st_mode):
            raise DeviceNotFound(path, "not a character device")
        return DeviceInfo(
            path=path,
            major=os.major(st.st_rdev),
            minor=os.minor(st.st_rdev),
            file_mode=stat.S_IMODE(st.st_mode),
        )

    def fake_device_info(self, prefix: str, device_id: str) -> DeviceInfo:
        path = f"{prefix}{device_id}"
        match = _TRAILING_DIGITS.search(path)
        return DeviceInfo(
            path=path,
            major=_FAKE_MAJORS.get(prefix, _FAKE_UVERBS_MAJOR),
            minor=int(match.group(1)) if match else 0,
            file_mode=0o666,
        )


def device_ids(paths: Iterable[str]) -> list[str]:
    """Return the trailing ID character of each accelerator path."""
    return [path[-1] for path in paths if path]
