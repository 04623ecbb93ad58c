"""
machine_id.py

Responsibility: Resolve a persistent identifier for the current host.

The identifier is the only input to key derivation, so it must be stable
across runs. Resolution walks an ordered list of probes and the first one
that yields a value wins:
- `MachineIdFileProbe`: systemd / dbus machine-id files (Linux)
- `IoregProbe`: IOPlatformUUID from the IO registry (macOS)

There is deliberately no random or hostname fallback. If no probe succeeds,
`FatalConfigurationError` is raised and the caller decides how to exit.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

logger = logging.getLogger(__name__)

MACHINE_ID_PATHS = (Path("/etc/machine-id"), Path("/var/lib/dbus/machine-id"))
IOREG_PATH = "/usr/sbin/ioreg"

_IOPLATFORM_UUID_RE = re.compile(r'"IOPlatformUUID"\s*=\s*"([^"]+)"')


class FatalConfigurationError(RuntimeError):
    pass


class Probe(Protocol):
    name: str

    def probe(self) -> str | None: ...


@dataclass(frozen=True)
class MachineIdFileProbe:
    paths: Sequence[Path] = MACHINE_ID_PATHS
    name: str = "machine-id file"

    def probe(self) -> str | None:
        for path in self.paths:
            try:
                value = path.read_text(encoding="utf-8").strip()
            except (OSError, UnicodeDecodeError):
                continue
            if value:
                logger.debug("Machine identifier read from %s", path)
                return value
        return None


def parse_ioreg_output(output: str) -> str | None:
    """
    Extract the IOPlatformUUID value from `ioreg` output, or None if absent.
    """
    match = _IOPLATFORM_UUID_RE.search(output)
    return match.group(1) if match else None


@dataclass(frozen=True)
class IoregProbe:
    command: str = IOREG_PATH
    name: str = "ioreg IOPlatformUUID"

    def probe(self) -> str | None:
        try:
            result = subprocess.run(
                [self.command, "-d2", "-c", "IOPlatformExpertDevice"],
                capture_output=True,
                text=True,
                check=False,
                timeout=30,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("ioreg query failed: %s", e)
            return None
        if result.returncode != 0:
            logger.debug("ioreg exited with status %d", result.returncode)
            return None
        return parse_ioreg_output(result.stdout)


DEFAULT_PROBES: tuple[Probe, ...] = (MachineIdFileProbe(), IoregProbe())


def resolve(probes: Sequence[Probe] = DEFAULT_PROBES) -> str:
    """
    Return the first identifier produced by `probes`.

    Raises FatalConfigurationError when none of them yields a value.
    """
    for p in probes:
        value = p.probe()
        if value:
            logger.debug("Machine identifier resolved via %s", p.name)
            return value
    raise FatalConfigurationError("Could not get persistent machine identifier")
