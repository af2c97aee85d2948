import logging
import subprocess
from typing import Dict, List

from zfsflex.errors import BackendError
from zfsflex.volumes.models import Dataset, DatasetProbe, ProbeStatus

logger = logging.getLogger(__name__)

# Diagnostic printed by `zfs list` for a missing dataset. Only this adapter
# looks at it; callers get ProbeStatus.NOT_FOUND.
NOT_FOUND_MARKER = "dataset does not exist"


class ZFSBackend:
    """Thin wrapper around the zfs command line."""

    fstype = "zfs"

    def __init__(self, zfs_binary: str = "zfs"):
        self.zfs_binary = zfs_binary

    def _zfs(self, *args: str) -> subprocess.CompletedProcess:
        cmd = [self.zfs_binary, *args]
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            return subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise BackendError(f"unable to run {self.zfs_binary}: {e}") from e

    def probe(self, name: str) -> DatasetProbe:
        """Look up a dataset by its full name."""
        result = self._zfs("list", "-H", "-p", "-t", "all", "-o", "name,type,mountpoint", name)
        if result.returncode != 0:
            if NOT_FOUND_MARKER in result.stderr:
                return DatasetProbe(status=ProbeStatus.NOT_FOUND)
            raise BackendError(result.stderr.strip() or f"zfs list exited with status {result.returncode}")

        lines = result.stdout.splitlines()
        fields = lines[0].split("\t") if lines else []
        if len(fields) < 3:
            raise BackendError(f"unexpected zfs list output for {name}: {result.stdout!r}")

        return DatasetProbe(
            status=ProbeStatus.FOUND,
            dataset=Dataset(name=fields[0], type=fields[1], mountpoint=fields[2]),
        )

    def create_filesystem(self, name: str, options: Dict[str, str]):
        args: List[str] = ["create"]
        for key, value in options.items():
            args.extend(["-o", f"{key}={value}"])
        args.append(name)

        result = self._zfs(*args)
        if result.returncode != 0:
            raise BackendError(f"failed to create filesystem: {result.stderr.strip()}")
        logger.info(f"Created filesystem {name} with {options}")

    def mount(self, name: str) -> str:
        """Mount a dataset at its native mountpoint and return that mountpoint."""
        result = self._zfs("mount", name)
        if result.returncode != 0:
            raise BackendError(f"failed to mount dataset: {result.stderr.strip()}")

        probe = self.probe(name)
        if not probe.found:
            raise BackendError(f"dataset {name} disappeared after mount")
        logger.info(f"Mounted {name} at {probe.dataset.mountpoint}")
        return probe.dataset.mountpoint
