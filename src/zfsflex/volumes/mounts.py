import logging
import os
import subprocess
from typing import Iterator, List, Optional

from zfsflex.config.settings import DEFAULT_MOUNTS_PATH
from zfsflex.errors import CommandError, HostIOError
from zfsflex.volumes.models import MountEntry

logger = logging.getLogger(__name__)


class MountTable:
    """
    Live view of the system mount table.

    Nothing is cached: every query re-reads the file so that each decision is
    made against the current state.
    """

    def __init__(self, path: str = DEFAULT_MOUNTS_PATH):
        self.path = path

    def entries(self) -> Iterator[MountEntry]:
        """
        Yields one MountEntry per line. Only the first three fields
        (device, mountpoint, fstype) are used; shorter lines are skipped.
        """
        try:
            # mountpoints are raw bytes; decode them the way sys.argv is decoded
            with open(self.path, "r", encoding="utf8", errors="surrogateescape") as f:
                for line in f:
                    parts = line.split()
                    if len(parts) < 3:
                        continue
                    yield MountEntry(parts[0], parts[1], parts[2])
        except OSError as e:
            raise HostIOError(f"unable to get mounts: {e}") from e

    def find(self, device: str, mountpoint: str) -> Optional[MountEntry]:
        for entry in self.entries():
            if entry.device == device and entry.mountpoint == mountpoint:
                return entry
        return None

    def find_mountpoint(self, mountpoint: str) -> Optional[MountEntry]:
        for entry in self.entries():
            if entry.mountpoint == mountpoint:
                return entry
        return None


class Mounter:
    """Wraps the mount and umount programs."""

    def __init__(self, mount_binary: str = "mount", umount_binary: str = "umount"):
        self.mount_binary = mount_binary
        self.umount_binary = umount_binary

    def make_mountpoint(self, path: str):
        try:
            os.makedirs(path, 0o755, exist_ok=True)
        except OSError as e:
            raise HostIOError(f"failed to create mount point: {e}") from e

    def bind(self, source: str, target: str):
        self._run(
            [self.mount_binary, "-o", "bind", source, target],
            "failed to mount dataset",
        )

    def unmount(self, target: str):
        self._run([self.umount_binary, target], "failed to unmount dataset")

    def _run(self, cmd: List[str], failure: str):
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            output = (e.stdout or "").strip()
            raise CommandError(
                f"{failure}: exit status {e.returncode}: {output}",
                command=cmd,
                returncode=e.returncode,
                output=output,
            ) from e
        except OSError as e:
            raise CommandError(f"{failure}: {e}", command=cmd) from e
