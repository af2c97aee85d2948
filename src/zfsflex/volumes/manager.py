import logging
import socket
from typing import Optional

from zfsflex.config.settings import Config
from zfsflex.errors import HostIOError
from zfsflex.volumes.executor import VolumeExecutor
from zfsflex.volumes.models import DriverResult
from zfsflex.volumes.mounts import MountTable, Mounter
from zfsflex.volumes.reconciler import VolumeReconciler
from zfsflex.volumes.request import build_provisioning_request, build_request
from zfsflex.volumes.zfs import ZFSBackend

logger = logging.getLogger(__name__)


class VolumeManager:
    """
    One method per FlexVolume call. Each call normalizes its arguments, asks the
    reconciler for an action, applies it and returns the result record.
    Failures are raised as DriverError subclasses.
    """

    def __init__(
        self,
        config: Config,
        backend: Optional[ZFSBackend] = None,
        mount_table: Optional[MountTable] = None,
        mounter: Optional[Mounter] = None,
    ):
        self.config = config
        self.backend = backend or ZFSBackend(config.zfs_binary)
        self.mount_table = mount_table or MountTable(config.mounts_path)
        self.mounter = mounter or Mounter(config.mount_binary, config.umount_binary)
        self.reconciler = VolumeReconciler(config.parent_dataset, self.backend, self.mount_table)
        self.executor = VolumeExecutor(self.backend, self.mounter)

    def init(self) -> DriverResult:
        return DriverResult()

    def attach(self, params: str) -> DriverResult:
        request = build_provisioning_request(params)
        action = self.reconciler.resolve_for_attach(request)
        message = self.executor.apply(action)
        return DriverResult(message=message, device=action.device)

    def wait_for_attach(self, device: str, params: str) -> DriverResult:
        request = build_request(params)
        action = self.reconciler.resolve_for_wait(device, request)
        return DriverResult(message=self.executor.apply(action), device=action.device)

    def is_attached(self, params: str, node: str) -> DriverResult:
        # datasets are local to the node, there is nothing to attach remotely
        return DriverResult(attached=True)

    def detach(self, device: str, node: Optional[str] = None) -> DriverResult:
        # datasets are never destroyed
        logger.info(f"Detach of {device} is a no-op")
        return DriverResult()

    def mount(self, mountpoint: str, options: str) -> DriverResult:
        request = build_request(options)
        action = self.reconciler.resolve_for_mount(mountpoint, request)
        return DriverResult(message=self.executor.apply(action), device=action.device)

    def mount_device(self, mountpoint: str, device: str, options: str) -> DriverResult:
        logger.debug(f"mountdevice called for {device}")
        return self.mount(mountpoint, options)

    def unmount(self, mountpoint: str) -> DriverResult:
        action = self.reconciler.resolve_for_unmount(mountpoint)
        return DriverResult(message=self.executor.apply(action))

    def unmount_device(self, mountpoint: str) -> DriverResult:
        return self.unmount(mountpoint)

    def get_volume_name(self, options: str) -> DriverResult:
        request = build_request(options)
        hostname = socket.gethostname()
        if not hostname:
            raise HostIOError("unable to determine node name")
        return DriverResult(
            volume_name=":".join([hostname, self.config.parent_dataset, request.dataset])
        )
