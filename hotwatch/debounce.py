# debounce.py
'''
Debounced event source built on the `watchdog` library.

A watchdog observer reports raw events from its own threads; `Debouncer`
holds them per path until the path has been quiet for *delay* seconds and then
sends the survivors as one batch on a `Channel`. Consumers read batches with
`Channel.recv()`, which raises `Disconnected` once the debouncer is stopped.

API
---
Debouncer(delay, tx, observer_factory=Observer, recursive=True, tick=None)
    • watch(path)    : subscribe a canonical path and add it as a root
    • unwatch(path)  : unsubscribe a root, drop its pending events
    • stop()         : stop watching; closes *tx*
'''

from __future__ import annotations

import errno
import logging
import os
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from queue import Queue
from typing import Callable, Dict, List, Optional, Set

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from .errors import IoError, WatcherInitError
from .event import ChangeEvent, EventKind, from_watchdog

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Channel — blocking hand-off between threads, closable by the sender
# ─────────────────────────────────────────────────────────────────────────────
class Disconnected(Exception):
  '''The sending side of a `Channel` is gone.'''


_CLOSED = object()


class Channel:
  def __init__(self) -> None:
    self._queue: Queue = Queue()
    self._closed = False
    self._lock = threading.Lock()

  def send(self, item: object) -> None:
    with self._lock:
      if self._closed:
        raise Disconnected('channel is closed')
      self._queue.put(item)

  def close(self) -> None:
    with self._lock:
      if self._closed:
        return
      self._closed = True
      self._queue.put(_CLOSED)

  @property
  def closed(self) -> bool:
    return self._closed

  def recv(self) -> object:
    '''Next item, blocking; `Disconnected` once closed and drained.'''
    item = self._queue.get()
    if item is _CLOSED:
      self._queue.put(_CLOSED)      # every later recv() sees it too
      raise Disconnected('channel is closed')
    return item


@dataclass
class DebounceResult:
  events: List[ChangeEvent] = field(default_factory=list)
  errors: List[Exception] = field(default_factory=list)

  @property
  def ok(self) -> bool:
    return not self.errors


# ─────────────────────────────────────────────────────────────────────────────
# Coalescing
# ─────────────────────────────────────────────────────────────────────────────
def _coalesce(existing: ChangeEvent, new: ChangeEvent) -> ChangeEvent:
  if new.kind is EventKind.ACCESS and existing.kind is not EventKind.ACCESS:
    return existing
  if existing.kind is EventKind.CREATE and new.kind is EventKind.MODIFY and not new.renamed:
    return existing
  return new


def _is_under(path: Path, root: Path) -> bool:
  return path == root or root in path.parents


class _RawEventHandler(FileSystemEventHandler):
  def __init__(self, sink: Callable[[ChangeEvent], None]) -> None:
    super().__init__()
    self._sink = sink

  def on_any_event(self, event: FileSystemEvent) -> None:
    change = from_watchdog(event)
    if change is not None:
      self._sink(change)


# ─────────────────────────────────────────────────────────────────────────────
# Debouncer
# ─────────────────────────────────────────────────────────────────────────────
class Debouncer:
  def __init__(
    self,
    delay: float,
    tx: Channel,
    *,
    observer_factory: Callable[[], BaseObserver] = Observer,
    recursive: bool = True,
    tick: Optional[float] = None,
  ) -> None:
    self.delay = delay
    self.recursive = recursive
    self._tx = tx
    self._tick = tick if tick is not None else max(delay / 4, 0.01)
    self._lock = threading.Lock()
    self._pending: 'OrderedDict[Path, List]' = OrderedDict()   # path → [event, last_seen]
    self._roots: Dict[Path, ObservedWatch] = {}
    self._lost: Set[Path] = set()
    self._handler = _RawEventHandler(self.push)
    self._stopped = threading.Event()

    try:
      self._observer = observer_factory()
      self._observer.start()
    except Exception as exc:
      raise WatcherInitError(f'failed to start file observer: {exc}') from exc

    self._flusher = threading.Thread(
      target=self._flush_loop, name='hotwatch-debouncer', daemon=True,
    )
    self._flusher.start()

  # --- roots -----------------------------------------------------------------
  def watch(self, path: Path) -> None:
    '''Subscribe canonical *path*; directories honour `recursive`.'''
    with self._lock:
      if self._stopped.is_set():
        raise WatcherInitError('watcher is closed')
      if path in self._roots:
        return
      recursive = self.recursive and path.is_dir()
      try:
        watch = self._observer.schedule(self._handler, str(path), recursive=recursive)
      except OSError as exc:
        raise IoError(f'cannot watch {path}: {exc}') from exc
      except Exception as exc:
        raise WatcherInitError(f'cannot watch {path}: {exc}') from exc
      self._roots[path] = watch
      self._lost.discard(path)
    logger.debug('watching %s (recursive=%s)', path, recursive)

  def unwatch(self, path: Path) -> None:
    with self._lock:
      if self._stopped.is_set():
        raise WatcherInitError('watcher is closed')
      watch = self._roots.get(path)
      if watch is None:
        raise WatcherInitError(f'path is not watched: {path}')
      try:
        self._observer.unschedule(watch)
      except OSError as exc:
        raise IoError(f'cannot unwatch {path}: {exc}') from exc
      except Exception as exc:
        raise WatcherInitError(f'cannot unwatch {path}: {exc}') from exc
      del self._roots[path]
      self._lost.discard(path)
      for pending in list(self._pending):
        if _is_under(pending, path) and not self._covered(pending):
          del self._pending[pending]
    logger.debug('unwatched %s', path)

  def _covered(self, path: Path) -> bool:
    return any(_is_under(path, root) for root in self._roots)

  @property
  def roots(self) -> List[Path]:
    with self._lock:
      return list(self._roots)

  # --- raw events ------------------------------------------------------------
  def push(self, event: ChangeEvent, now: Optional[float] = None) -> None:
    '''Record a raw event; called from the observer threads.'''
    now = time.monotonic() if now is None else now
    key = event.path
    with self._lock:
      entry = self._pending.get(key)
      if entry is None:
        self._pending[key] = [event, now]
      else:
        entry[0] = _coalesce(entry[0], event)
        entry[1] = now

  def report_error(self, err: Exception) -> None:
    self._send(DebounceResult(errors=[err]))

  # --- flushing --------------------------------------------------------------
  def flush(self, now: Optional[float] = None) -> None:
    '''Send every event that has been quiet for `delay` seconds.'''
    now = time.monotonic() if now is None else now
    with self._lock:
      ready = [
        path for path, (_, last_seen) in self._pending.items()
        if now - last_seen >= self.delay
      ]
      events = [self._pending.pop(path)[0] for path in ready]
      vanished = [
        root for root in self._roots
        if root not in self._lost and not os.path.lexists(root)
      ]
      self._lost.update(vanished)
    if events:
      self._send(DebounceResult(events=events))
    if vanished:
      self._send(DebounceResult(errors=[
        FileNotFoundError(errno.ENOENT, 'watched path vanished', str(root))
        for root in vanished
      ]))

  def _send(self, result: DebounceResult) -> None:
    try:
      self._tx.send(result)
    except Disconnected:
      logger.debug('dropping batch, channel is closed')

  def _flush_loop(self) -> None:
    while not self._stopped.wait(self._tick):
      self.flush()

  def stop(self) -> None:
    if self._stopped.is_set():
      return
    self._stopped.set()
    self._observer.stop()
    if self._observer is not threading.current_thread():
      self._observer.join()
    if self._flusher is not threading.current_thread():
      self._flusher.join()
    with self._lock:
      self._pending.clear()
      self._roots.clear()
    self._tx.close()
    logger.debug('debouncer stopped')
