# This variable is intended to be overwritten during the build/release process
__version__ = "0.1.0"


def get_version() -> str:
    """Returns the current version of the driver."""
    return __version__
