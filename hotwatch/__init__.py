# hotwatch/__init__.py
import logging
from importlib.metadata import version, PackageNotFoundError

try:
  __version__ = version(__name__)
except PackageNotFoundError:      # development mode
  __version__ = '0.0.0.dev0'

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .config import Config                                        # re-export
from .errors import Error, IoError, WatcherInitError, RegistryPoisonedError  # re-export
from .event import ChangeEvent, EventKind                         # re-export
from .watcher import Hotwatch                                     # re-export
from . import blocking                                            # re-export

__all__ = [
  'Hotwatch', 'blocking', 'Config',
  'ChangeEvent', 'EventKind',
  'Error', 'IoError', 'WatcherInitError', 'RegistryPoisonedError',
]
