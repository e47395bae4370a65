from __future__ import annotations

import logging
import os

from ..core.config import Settings
from ..core.errors import HookNotFound
from ..utils.hardware import FilesystemProbe, HostProbe

HOOK_BINARY = "habana-container-hook"
HOOK_DEFAULT_PATH = "/usr/bin/habana-container-hook"

logger = logging.getLogger(__name__)


def resolve_hook_path(settings: Settings, probe: FilesystemProbe | None = None) -> str:
    """Locate habana-container-hook.

    Looked up, in order, on ``PATH``, beside the running executable, in
    ``settings.binaries_dir`` and finally at ``/usr/bin``. Only existence is
    checked.
    """
    probe = probe or HostProbe()

    found = probe.lookup(HOOK_BINARY)
    if found:
        return found

    current = probe.current_executable()
    if current:
        candidate = os.path.join(os.path.dirname(current), HOOK_BINARY)
        if probe.exists(candidate):
            return candidate

    candidate = os.path.join(settings.binaries_dir, HOOK_BINARY)
    if probe.exists(candidate):
        return candidate

    if probe.exists(HOOK_DEFAULT_PATH):
        return HOOK_DEFAULT_PATH

    logger.debug("%s not found on PATH, next to %s, in %s or at %s", HOOK_BINARY, current, settings.binaries_dir, HOOK_DEFAULT_PATH)
    raise HookNotFound()
