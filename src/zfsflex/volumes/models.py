import json
from enum import Enum
from typing import Dict, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field

FILESYSTEM = "filesystem"


class VolumeParams(BaseModel):
    """Raw JSON options handed over by kubelet."""

    # kubelet adds its own kubernetes.io/* keys to the payload
    model_config = ConfigDict(extra="ignore")

    dataset: str = ""
    quota: str = ""
    reservation: str = ""
    compression: str = ""


class VolumeRequest(BaseModel):
    dataset: str
    quota: int = 0
    reservation: int = 0
    compression: Optional[str] = None


class Dataset(BaseModel):
    name: str
    type: str
    mountpoint: str = ""

    @property
    def is_filesystem(self) -> bool:
        return self.type == FILESYSTEM

    @property
    def has_mountpoint(self) -> bool:
        return self.mountpoint not in ("", "-", "none", "legacy")


class ProbeStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"


class DatasetProbe(BaseModel):
    status: ProbeStatus
    dataset: Optional[Dataset] = None

    @property
    def found(self) -> bool:
        return self.status == ProbeStatus.FOUND


class MountEntry(NamedTuple):
    device: str
    mountpoint: str
    fstype: str


class ActionKind(str, Enum):
    NOOP = "noop"
    CREATE = "create"
    ALREADY_MOUNTED = "already_mounted"
    DIRECT_MOUNT = "direct_mount"
    BIND_MOUNT = "bind_mount"
    MAKE_DIR_AND_BIND_MOUNT = "make_dir_and_bind_mount"
    ALREADY_UNMOUNTED = "already_unmounted"
    UNMOUNT = "unmount"


class Action(BaseModel):
    kind: ActionKind
    device: Optional[str] = None
    mountpoint: Optional[str] = None
    source: Optional[str] = None
    options: Dict[str, str] = {}
    mount_source: bool = False  # global mount must happen before binding
    message: str = ""


class DriverResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "Success"
    message: Optional[str] = None
    device: Optional[str] = None
    volume_name: Optional[str] = Field(default=None, alias="volumeName")
    attached: Optional[bool] = None

    def to_json(self) -> str:
        data = self.model_dump(by_alias=True, exclude_none=True)
        if not data.get("message"):
            data.pop("message", None)
        return json.dumps(data)
