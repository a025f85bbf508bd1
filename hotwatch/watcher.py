# watcher.py
'''
Non-blocking hotwatch.

    hw = Hotwatch()                                   # 2 s coalescing delay
    hw.watch('config.toml', lambda ev: reload())      # returns immediately
    ...
    hw.close()                                        # or let it be collected

Handlers run on a background thread, one event at a time, in the order the
debouncer delivered them. A handler is registered per path; events are routed
to the handler of the nearest watched ancestor of the event's path.
'''

from __future__ import annotations

import logging
import os
import threading
import weakref
from pathlib import Path
from typing import Optional, Union

from .config import Config
from .debounce import Channel, Debouncer
from .dispatch import dispatch_forever
from .errors import IoError
from .registry import Handler, PathRegistry

logger = logging.getLogger(__name__)

PathLike = Union[str, 'os.PathLike[str]']


def canonicalize(path: PathLike) -> Path:
  '''Absolute, symlink-free form of an existing *path*.'''
  try:
    return Path(path).resolve(strict=True)
  except (OSError, RuntimeError) as exc:
    raise IoError(f'cannot resolve {path}: {exc}') from exc


def _shutdown(debouncer: Debouncer, registry: PathRegistry) -> None:
  debouncer.stop()
  registry.clear()


class _WatcherBase:
  '''Debouncer + registry plumbing shared by both modes.'''

  def __init__(self, delay: Optional[float] = None, *, cfg: Optional[Config] = None) -> None:
    cfg = cfg or Config()
    if delay is not None:
      cfg = cfg.with_delay(delay)
    self.cfg = cfg
    self._registry = PathRegistry()
    self._rx = Channel()
    self._debouncer = Debouncer(
      cfg.delay,
      self._rx,
      observer_factory=cfg.observer_factory,
      recursive=cfg.recursive,
      tick=cfg.tick,
    )
    self._finalizer = weakref.finalize(self, _shutdown, self._debouncer, self._registry)

  @classmethod
  def with_delay(cls, delay: float):
    return cls(delay)

  def watch(self, path: PathLike, handler: Handler) -> None:
    '''
    Watch *path* and route its events (and, for a directory, the events of
    everything below it) to *handler*. Watching a path again replaces its
    handler. Raises `IoError` if the path can't be resolved and
    `WatcherInitError`/`IoError` if the observer refuses it; nothing is
    registered in either case.
    '''
    absolute_path = canonicalize(path)
    was_watched = absolute_path in self._debouncer.roots
    self._debouncer.watch(absolute_path)
    try:
      self._registry.insert(absolute_path, handler)
    except BaseException:
      if not was_watched:
        self._debouncer.unwatch(absolute_path)
      raise

  def unwatch(self, path: PathLike) -> None:
    '''Stop watching *path*; `WatcherInitError` if it wasn't watched.'''
    absolute_path = canonicalize(path)
    self._debouncer.unwatch(absolute_path)
    self._registry.remove(absolute_path)

  @property
  def closed(self) -> bool:
    return not self._finalizer.alive

  def close(self) -> None:
    '''Unwatch everything and disconnect the event stream.'''
    self._finalizer()

  def __enter__(self):
    return self

  def __exit__(self, *exc_info) -> None:
    self.close()

  def __repr__(self) -> str:
    return f'{type(self).__name__}(delay={self.cfg.delay!r}, watched={len(self._registry)})'


class Hotwatch(_WatcherBase):
  '''
  Watches paths and runs handlers on a background thread.

  The thread starts with the instance and ends once the instance is closed
  (or garbage collected). Exceptions raised by a handler end the thread.
  Calling `watch`/`unwatch` from inside a handler is not supported.
  '''

  def __init__(self, delay: Optional[float] = None, *, cfg: Optional[Config] = None) -> None:
    super().__init__(delay, cfg=cfg)
    self._thread = threading.Thread(
      target=dispatch_forever,
      args=(self._registry, self._rx),
      name='hotwatch-dispatch',
      daemon=True,
    )
    self._thread.start()
