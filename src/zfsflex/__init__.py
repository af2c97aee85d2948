import logging

from zfsflex.version import __version__

# kubelet parses the combined output of the driver, so log records must never
# reach stderr unless a log file is configured.
logging.getLogger(__name__).addHandler(logging.NullHandler())
