import os
from typing import Optional

DEFAULT_PARENT_DATASET = "rpool/k8s/volumes"
DEFAULT_MOUNTS_PATH = "/proc/mounts"


class Config:
    """Driver configuration.

    Built once when the driver starts and handed to every component that needs
    it. Explicit arguments win over ``ZFSFLEX_*`` environment variables, which
    win over the defaults.
    """

    def __init__(
        self,
        parent_dataset: Optional[str] = None,
        mounts_path: Optional[str] = None,
        zfs_binary: Optional[str] = None,
        mount_binary: Optional[str] = None,
        umount_binary: Optional[str] = None,
        log_file: Optional[str] = None,
        log_level: Optional[str] = None,
    ):
        self.parent_dataset = (
            parent_dataset
            or os.getenv("ZFSFLEX_PARENT_DATASET", DEFAULT_PARENT_DATASET)
        ).rstrip("/")
        self.mounts_path = mounts_path or os.getenv("ZFSFLEX_MOUNTS_PATH", DEFAULT_MOUNTS_PATH)
        self.zfs_binary = zfs_binary or os.getenv("ZFSFLEX_ZFS_BINARY", "zfs")
        self.mount_binary = mount_binary or os.getenv("ZFSFLEX_MOUNT_BINARY", "mount")
        self.umount_binary = umount_binary or os.getenv("ZFSFLEX_UMOUNT_BINARY", "umount")
        self.log_file = log_file or os.getenv("ZFSFLEX_LOG_FILE") or None
        self.log_level = (log_level or os.getenv("ZFSFLEX_LOG_LEVEL", "INFO")).upper()
