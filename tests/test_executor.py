import pytest

from zfsflex.volumes.executor import VolumeExecutor
from zfsflex.volumes.models import Action, ActionKind


@pytest.fixture
def executor(backend, mounter):
    return VolumeExecutor(backend, mounter)


@pytest.mark.parametrize("kind", [ActionKind.NOOP, ActionKind.ALREADY_MOUNTED, ActionKind.ALREADY_UNMOUNTED])
def test_no_op_actions_touch_nothing(executor, backend, mounter, kind):
    message = executor.apply(Action(kind=kind, device="tank/a", mountpoint="/mnt/a", message="done"))

    assert message == "done"
    assert backend.created == [] and backend.mounted == []
    assert mounter.made == [] and mounter.binds == [] and mounter.unmounted == []


def test_create(executor, backend):
    message = executor.apply(Action(kind=ActionKind.CREATE, device="tank/a", options={"quota": "1024"}))

    assert message == "created filesystem"
    assert backend.created == [("tank/a", {"quota": "1024"})]


def test_direct_mount(executor, backend, mounter):
    backend.add("tank/a", mountpoint="/mnt/a")

    executor.apply(Action(kind=ActionKind.DIRECT_MOUNT, device="tank/a", mountpoint="/mnt/a"))

    assert backend.mounted == ["tank/a"]
    assert mounter.binds == []


def test_make_dir_and_bind_mount(executor, backend, mounter):
    executor.apply(
        Action(kind=ActionKind.MAKE_DIR_AND_BIND_MOUNT, device="tank/a", mountpoint="/pods/a", source="/tank/a")
    )

    assert mounter.made == ["/pods/a"]
    assert mounter.binds == [("/tank/a", "/pods/a")]
    assert backend.mounted == []


def test_bind_mount_into_existing_directory(executor, mounter):
    executor.apply(Action(kind=ActionKind.BIND_MOUNT, device="tank/a", mountpoint="/pods/a", source="/tank/a"))

    assert mounter.made == []
    assert mounter.binds == [("/tank/a", "/pods/a")]


def test_bind_mount_after_global_mount(executor, backend, mounter):
    backend.add("tank/a")

    executor.apply(
        Action(kind=ActionKind.BIND_MOUNT, device="tank/a", mountpoint="/pods/a", source="/tank/a", mount_source=True)
    )

    assert backend.mounted == ["tank/a"]
    assert mounter.binds == [("/tank/a", "/pods/a")]


def test_unmount(executor, mounter):
    executor.apply(Action(kind=ActionKind.UNMOUNT, mountpoint="/pods/a"))
    assert mounter.unmounted == ["/pods/a"]
