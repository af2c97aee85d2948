import pytest

from zfsflex.config.settings import Config
from zfsflex.errors import BackendError
from zfsflex.volumes.models import Dataset, DatasetProbe, ProbeStatus
from zfsflex.volumes.mounts import MountTable

PARENT = "tank/k8s/volumes"


class FakeBackend:
    """In-memory stand-in for ZFSBackend."""

    fstype = "zfs"

    def __init__(self):
        self.datasets = {}
        self.created = []
        self.mounted = []
        self.probe_error = None

    def add(self, name, type="filesystem", mountpoint=None):
        self.datasets[name] = Dataset(name=name, type=type, mountpoint=mountpoint or f"/{name}")

    def probe(self, name):
        if self.probe_error:
            raise BackendError(self.probe_error)
        if name not in self.datasets:
            return DatasetProbe(status=ProbeStatus.NOT_FOUND)
        return DatasetProbe(status=ProbeStatus.FOUND, dataset=self.datasets[name])

    def create_filesystem(self, name, options):
        self.created.append((name, dict(options)))
        self.add(name)

    def mount(self, name):
        self.mounted.append(name)
        return self.datasets[name].mountpoint


class FakeMounter:
    def __init__(self):
        self.made = []
        self.binds = []
        self.unmounted = []

    def make_mountpoint(self, path):
        self.made.append(path)

    def bind(self, source, target):
        self.binds.append((source, target))

    def unmount(self, target):
        self.unmounted.append(target)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def mounter():
    return FakeMounter()


@pytest.fixture
def mounts_file(tmp_path):
    path = tmp_path / "mounts"
    path.write_text("proc /proc proc rw,nosuid 0 0\n")
    return path


@pytest.fixture
def mount_table(mounts_file):
    return MountTable(str(mounts_file))


@pytest.fixture
def config(mounts_file):
    return Config(parent_dataset=PARENT, mounts_path=str(mounts_file))


@pytest.fixture
def add_mount(mounts_file):
    def _add(device, mountpoint, fstype="zfs"):
        with open(mounts_file, "a") as f:
            f.write(f"{device} {mountpoint} {fstype} rw,xattr,noacl 0 0\n")

    return _add
