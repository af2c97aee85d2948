import subprocess
from unittest.mock import patch

import pytest

from zfsflex.errors import CommandError, HostIOError
from zfsflex.volumes.models import MountEntry
from zfsflex.volumes.mounts import MountTable, Mounter


def test_entries_parses_first_three_fields(tmp_path):
    path = tmp_path / "mounts"
    path.write_text(
        "tank/k8s/volumes/pvc-1 /tank/k8s/volumes/pvc-1 zfs rw,xattr,noacl 0 0\n"
        "tmpfs /run tmpfs\n"
    )
    entries = list(MountTable(str(path)).entries())
    assert entries == [
        MountEntry("tank/k8s/volumes/pvc-1", "/tank/k8s/volumes/pvc-1", "zfs"),
        MountEntry("tmpfs", "/run", "tmpfs"),
    ]


def test_entries_skips_short_lines(tmp_path):
    path = tmp_path / "mounts"
    path.write_text("only two\n\n   \nsysfs /sys sysfs rw 0 0\n")
    assert list(MountTable(str(path)).entries()) == [MountEntry("sysfs", "/sys", "sysfs")]


def test_entries_rereads_file(tmp_path):
    path = tmp_path / "mounts"
    path.write_text("")
    table = MountTable(str(path))
    assert table.find_mountpoint("/mnt/a") is None

    path.write_text("tank/a /mnt/a zfs rw 0 0\n")
    assert table.find_mountpoint("/mnt/a") == MountEntry("tank/a", "/mnt/a", "zfs")


def test_missing_mount_table(tmp_path):
    table = MountTable(str(tmp_path / "missing"))
    with pytest.raises(HostIOError) as exc:
        table.find("tank/a", "/mnt/a")
    assert "unable to get mounts" in exc.value.message


def test_find_requires_device_and_mountpoint(tmp_path):
    path = tmp_path / "mounts"
    path.write_text("tank/a /mnt/a zfs rw 0 0\ntank/b /mnt/b zfs rw 0 0\n")
    table = MountTable(str(path))

    assert table.find("tank/a", "/mnt/a") == MountEntry("tank/a", "/mnt/a", "zfs")
    assert table.find("tank/a", "/mnt/b") is None
    assert table.find_mountpoint("/mnt/b").device == "tank/b"


@patch("os.makedirs")
def test_make_mountpoint(mock_makedirs):
    Mounter().make_mountpoint("/var/lib/kubelet/pods/x/volumes/pvc-1")
    mock_makedirs.assert_called_once_with("/var/lib/kubelet/pods/x/volumes/pvc-1", 0o755, exist_ok=True)


@patch("os.makedirs")
def test_make_mountpoint_failure(mock_makedirs):
    mock_makedirs.side_effect = PermissionError("denied")
    with pytest.raises(HostIOError) as exc:
        Mounter().make_mountpoint("/mnt/x")
    assert "failed to create mount point" in exc.value.message


@patch("subprocess.run")
def test_bind(mock_run):
    Mounter().bind("/tank/k8s/volumes/pvc-1", "/mnt/pvc-1")

    args, kwargs = mock_run.call_args
    assert args[0] == ["mount", "-o", "bind", "/tank/k8s/volumes/pvc-1", "/mnt/pvc-1"]
    assert kwargs["check"] is True


@patch("subprocess.run")
def test_bind_failure_keeps_output(mock_run):
    mock_run.side_effect = subprocess.CalledProcessError(32, ["mount"], output="mount: /mnt/pvc-1: special device does not exist.\n")

    with pytest.raises(CommandError) as exc:
        Mounter().bind("/tank/pvc-1", "/mnt/pvc-1")

    assert exc.value.returncode == 32
    assert exc.value.output == "mount: /mnt/pvc-1: special device does not exist."
    assert exc.value.message.startswith("failed to mount dataset")
    assert exc.value.exit_code == -4


@patch("subprocess.run")
def test_unmount(mock_run):
    Mounter(umount_binary="/usr/bin/umount").unmount("/mnt/pvc-1")
    assert mock_run.call_args[0][0] == ["/usr/bin/umount", "/mnt/pvc-1"]


@patch("subprocess.run")
def test_missing_binary(mock_run):
    mock_run.side_effect = FileNotFoundError("umount")
    with pytest.raises(CommandError) as exc:
        Mounter().unmount("/mnt/pvc-1")
    assert "failed to unmount dataset" in exc.value.message


def test_entries_tolerates_non_utf8_mountpoints(tmp_path):
    path = tmp_path / "mounts"
    path.write_bytes(b"tank/x /mnt/caf\xe9 zfs rw 0 0\ntank/y /mnt/other zfs rw 0 0\n")
    table = MountTable(str(path))

    assert table.find_mountpoint("/mnt/other") == MountEntry("tank/y", "/mnt/other", "zfs")
    # same decoding as command line arguments
    assert table.find("tank/x", b"/mnt/caf\xe9".decode("utf8", "surrogateescape")) is not None
