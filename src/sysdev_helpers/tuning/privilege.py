from __future__ import annotations

import os
import shutil
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

import attrs


class ElevationFailed(RuntimeError):
    """Privileges needed to mutate kernel tunables could not be obtained."""


class TunableIOError(OSError):
    """A read or write of a kernel pseudo-file was rejected."""


def effective_uid_is_root() -> bool:
    return os.geteuid() == 0


def sudo_validate(*, sudo: str = "sudo", interactive: bool = True) -> bool:
    """Run `sudo -v` once (prompting when interactive). Returns True on success."""
    if shutil.which(sudo) is None:
        return False
    argv = [sudo, "-v"] if interactive else [sudo, "-n", "-v"]
    try:
        return subprocess.run(argv, check=False).returncode == 0
    except OSError:
        return False


@attrs.define(frozen=True, slots=True)
class ElevatedHandle:
    """Performs pseudo-file I/O with the rights obtained by a PrivilegeContext.

    `use_sudo=False` means the process already runs as root (or the tree is
    user-writable, as in tests) and plain file I/O is used.
    """

    use_sudo: bool = False
    sudo: str = "sudo"

    def read(self, path: Path) -> str:
        try:
            return path.read_text().strip()
        except PermissionError:
            if not self.use_sudo:
                raise TunableIOError(f"Permission denied reading {path}") from None
        except OSError as e:
            raise TunableIOError(f"Failed to read {path}: {e.strerror or e}") from e
        try:
            out = subprocess.check_output([self.sudo, "cat", str(path)], stderr=subprocess.PIPE)
        except subprocess.CalledProcessError as e:
            raise TunableIOError(f"Failed to read {path}: {_stderr_text(e)}") from e
        except OSError as e:
            raise TunableIOError(f"Failed to run {self.sudo}: {e}") from e
        return out.decode(errors="replace").strip()

    def write(self, path: Path, value: str) -> None:
        if not self.use_sudo:
            try:
                with path.open("w") as f:
                    f.write(f"{value}\n")
            except OSError as e:
                raise TunableIOError(f"Failed to write {value!r} to {path}: {e.strerror or e}") from e
            return

        try:
            subprocess.run(
                [self.sudo, "tee", str(path)],
                input=f"{value}\n".encode(),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise TunableIOError(f"Failed to write {value!r} to {path}: {_stderr_text(e)}") from e
        except OSError as e:
            raise TunableIOError(f"Failed to run {self.sudo}: {e}") from e


def _stderr_text(e: subprocess.CalledProcessError) -> str:
    err = e.stderr.decode(errors="replace").strip() if isinstance(e.stderr, bytes) else (e.stderr or "")
    return err or f"exit status {e.returncode}"


@attrs.define(slots=True)
class PrivilegeContext:
    """Lazily acquires elevated rights once and hands out the same handle.

    A failed elevation is remembered as well, so callers never prompt twice
    within one run.
    """

    is_privileged: Callable[[], bool] | None = None
    elevate: Callable[[], bool] | None = None
    sudo: str = "sudo"
    interactive: bool = True
    _handle: ElevatedHandle | None = attrs.field(default=None, init=False)
    _failed: bool = attrs.field(default=False, init=False)

    @property
    def elevated(self) -> bool:
        return self._handle is not None

    def ensure(self) -> ElevatedHandle:
        if self._handle is not None:
            return self._handle
        if self._failed:
            raise ElevationFailed("Elevation already failed in this run")

        is_privileged = self.is_privileged or effective_uid_is_root
        if is_privileged():
            self._handle = ElevatedHandle(use_sudo=False, sudo=self.sudo)
            return self._handle

        print("Requesting elevated privileges...", file=sys.stderr)
        elevate = self.elevate or (lambda: sudo_validate(sudo=self.sudo, interactive=self.interactive))
        if not elevate():
            self._failed = True
            raise ElevationFailed(f"Failed to gain {self.sudo} access")
        self._handle = ElevatedHandle(use_sudo=True, sudo=self.sudo)
        return self._handle
