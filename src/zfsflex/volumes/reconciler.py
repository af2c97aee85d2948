import logging
import os
from typing import Dict

from zfsflex.errors import BackendError, ConflictError, DeviceMismatchError
from zfsflex.volumes.models import Action, ActionKind, Dataset, VolumeRequest
from zfsflex.volumes.mounts import MountTable

logger = logging.getLogger(__name__)


class VolumeReconciler:
    """
    Decides the smallest action that moves the node from its current state to
    the one a request asks for.

    The reconciler only reads state (dataset probe, mount table, target
    directory); the VolumeExecutor performs the returned Action. Being in the
    desired state already is always a success.
    """

    def __init__(self, parent: str, backend, mount_table: MountTable):
        self.parent = parent.rstrip("/")
        self.backend = backend
        self.mount_table = mount_table

    def device_path(self, dataset: str) -> str:
        return f"{self.parent}/{dataset}"

    def _probe(self, device: str, failure: str):
        try:
            return self.backend.probe(device)
        except BackendError as e:
            raise BackendError(f"{failure}: {e.message}") from e

    def _require_filesystem(self, device: str) -> Dataset:
        probe = self._probe(device, "failed to get dataset")
        if not probe.found:
            raise ConflictError(f"dataset {device} does not exist")
        if not probe.dataset.is_filesystem:
            raise ConflictError("existing dataset is not a filesystem")
        return probe.dataset

    def resolve_for_attach(self, request: VolumeRequest) -> Action:
        device = self.device_path(request.dataset)

        probe = self._probe(device, "failed to check for filesystem")
        if probe.found:
            if not probe.dataset.is_filesystem:
                raise ConflictError("existing dataset is not a filesystem")
            # existing volumes are never altered, even if quota/reservation differ
            return Action(kind=ActionKind.NOOP, device=device, message="found existing filesystem")

        options: Dict[str, str] = {"quota": str(request.quota)}
        if request.reservation > 0:
            options["reservation"] = str(request.reservation)
        if request.compression:
            options["compression"] = request.compression

        logger.info(f"Dataset {device} not found, will create it")
        return Action(kind=ActionKind.CREATE, device=device, options=options)

    def resolve_for_wait(self, device: str, request: VolumeRequest) -> Action:
        expected = self.device_path(request.dataset)
        if expected != device:
            raise DeviceMismatchError(f"devices do not match: {device} != {expected}")

        self._require_filesystem(expected)
        return Action(kind=ActionKind.NOOP, device=expected, message="found existing filesystem")

    def resolve_for_mount(self, mountpoint: str, request: VolumeRequest) -> Action:
        device = self.device_path(request.dataset)

        entry = self.mount_table.find(device, mountpoint)
        if entry is not None:
            if entry.fstype != self.backend.fstype:
                raise ConflictError(f"unexpected filesystem: {entry.fstype}")
            return Action(
                kind=ActionKind.ALREADY_MOUNTED,
                device=device,
                mountpoint=mountpoint,
                message="already mounted",
            )

        dataset = self._require_filesystem(device)

        if dataset.mountpoint == mountpoint:
            # mountpoint is set but not mounted
            return Action(kind=ActionKind.DIRECT_MOUNT, device=device, mountpoint=mountpoint)

        if not dataset.has_mountpoint:
            raise ConflictError(f"dataset {device} has no native mountpoint")

        # The dataset keeps its single real mount at the native location and
        # every consumer gets a bind mount of it.
        global_mount = self.mount_table.find(device, dataset.mountpoint)
        if global_mount is not None and global_mount.fstype != self.backend.fstype:
            raise ConflictError(f"unexpected filesystem: {global_mount.fstype}")

        kind = ActionKind.BIND_MOUNT if os.path.isdir(mountpoint) else ActionKind.MAKE_DIR_AND_BIND_MOUNT
        return Action(
            kind=kind,
            device=device,
            mountpoint=mountpoint,
            source=dataset.mountpoint,
            mount_source=global_mount is None,
        )

    def resolve_for_unmount(self, mountpoint: str) -> Action:
        # bind mounts show up with a synthetic device, so match on mountpoint only
        if self.mount_table.find_mountpoint(mountpoint) is None:
            return Action(kind=ActionKind.ALREADY_UNMOUNTED, mountpoint=mountpoint, message="already unmounted")
        return Action(kind=ActionKind.UNMOUNT, mountpoint=mountpoint)
