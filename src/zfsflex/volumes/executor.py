import logging

from zfsflex.volumes.models import Action, ActionKind
from zfsflex.volumes.mounts import Mounter

logger = logging.getLogger(__name__)


class VolumeExecutor:
    """Carries out the Action chosen by the reconciler. Nothing is retried."""

    def __init__(self, backend, mounter: Mounter):
        self.backend = backend
        self.mounter = mounter

    def apply(self, action: Action) -> str:
        """Performs the action and returns the message for the result record."""
        logger.info(f"Applying {action.kind.value} for device={action.device} mountpoint={action.mountpoint}")

        if action.kind in (ActionKind.NOOP, ActionKind.ALREADY_MOUNTED, ActionKind.ALREADY_UNMOUNTED):
            return action.message

        if action.kind == ActionKind.CREATE:
            self.backend.create_filesystem(action.device, action.options)
            return "created filesystem"

        if action.kind == ActionKind.DIRECT_MOUNT:
            self.backend.mount(action.device)
            return action.message

        if action.kind in (ActionKind.BIND_MOUNT, ActionKind.MAKE_DIR_AND_BIND_MOUNT):
            if action.mount_source:
                self.backend.mount(action.device)
            if action.kind == ActionKind.MAKE_DIR_AND_BIND_MOUNT:
                self.mounter.make_mountpoint(action.mountpoint)
            self.mounter.bind(action.source, action.mountpoint)
            return action.message

        if action.kind == ActionKind.UNMOUNT:
            self.mounter.unmount(action.mountpoint)
            return action.message

        raise ValueError(f"Unsupported action: {action.kind}")
