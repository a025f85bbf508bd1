# errors.py
'''
Exceptions raised by hotwatch.

Everything raised on purpose derives from `Error`:

    Error
    ├── IoError                path can't be read / canonicalized, native I/O
    ├── WatcherInitError       backend failed to start, (un)subscribe failed
    └── RegistryPoisonedError  registry state is unusable after a failure
'''

from __future__ import annotations


class Error(Exception):
  '''Base class for hotwatch errors.'''


class IoError(Error):
  '''A path couldn't be accessed; the original `OSError` is chained.'''


class WatcherInitError(Error):
  '''The native watcher couldn't start, or couldn't (un)watch a path.'''


class RegistryPoisonedError(Error):
  '''A registry operation failed mid-update; the registry is unusable.'''
