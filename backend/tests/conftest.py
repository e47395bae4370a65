import errno
import os
import stat
from types import SimpleNamespace

import pytest

from habana_nri.core.config import RuntimeMode, Settings
from habana_nri.utils.hardware import DeviceCatalog

HOOK_ON_PATH = "/opt/habana/bin/habana-container-hook"


class FakeProbe:
    """In-memory stand-in for the host filesystem."""

    def __init__(self, on_path=None, files=(), dirs=None, nodes=None, executable=None):
        self.on_path = dict(on_path or {})
        self.files = set(files)
        self.dirs = dict(dirs or {})
        self.nodes = dict(nodes or {})
        self.executable = executable

    def lookup(self, name):
        return self.on_path.get(name)

    def exists(self, path):
        return path in self.files or path in self.nodes

    def stat(self, path):
        if path not in self.nodes:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        major, minor = self.nodes[path]
        return SimpleNamespace(st_mode=stat.S_IFCHR | 0o660, st_rdev=os.makedev(major, minor))

    def list_dir(self, path):
        if path not in self.dirs:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        entries = self.dirs[path]
        if isinstance(entries, Exception):
            raise entries
        return list(entries)

    def current_executable(self):
        return self.executable


def gaudi_host(count=8, **overrides):
    """A host with ``count`` accelerators, one uverbs node each and the hook on PATH."""
    nodes = {}
    dirs = {"/dev/accel": []}
    for i in range(count):
        nodes[f"/dev/accel/accel{i}"] = (508, i)
        nodes[f"/dev/accel/accel_controlD{i}"] = (508, 64 + i)
        nodes[f"/dev/infiniband/uverbs{i + 9}"] = (231, 192 + i)
        dirs["/dev/accel"] += [f"accel{i}", f"accel_controlD{i}"]
        dirs[f"/sys/class/infiniband/hlib_{i}/device/infiniband_verbs"] = [f"uverbs{i + 9}"]
    params = {"on_path": {"habana-container-hook": HOOK_ON_PATH}, "dirs": dirs, "nodes": nodes}
    params.update(overrides)
    return FakeProbe(**params)


@pytest.fixture
def make_probe():
    return FakeProbe


@pytest.fixture
def host_probe():
    return gaudi_host()


@pytest.fixture
def catalog(host_probe):
    return DeviceCatalog(host_probe)


@pytest.fixture
def make_settings():
    def factory(**values):
        values.setdefault("runtime_mode", RuntimeMode.MODERN)
        return Settings(_env_file=None, **values)

    return factory
