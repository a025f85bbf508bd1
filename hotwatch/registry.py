# registry.py
'''
Path → handler mapping, shared between the caller and the dispatch thread.

Lookups resolve to the nearest registered ancestor of a path (the path itself
included), so watching "dir" and "dir/file1" routes events for file1 to the
file1 handler only.
'''

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

from .dispatch import log_matching_path
from .errors import RegistryPoisonedError
from .event import ChangeEvent

Handler = Callable[[ChangeEvent], object]


class PathRegistry:
  def __init__(self) -> None:
    self._handlers: Dict[Path, Handler] = {}
    self._lock = threading.Lock()
    self._poisoned = False

  @contextmanager
  def _guard(self) -> Iterator[Dict[Path, Handler]]:
    with self._lock:
      if self._poisoned:
        raise RegistryPoisonedError('registry is poisoned by an earlier failure')
      try:
        yield self._handlers
      except BaseException:
        self._poisoned = True
        raise

  # ─────────────────────────────────────────────────────────────────────────
  # Mutation
  # ─────────────────────────────────────────────────────────────────────────
  def insert(self, path: Path, handler: Handler) -> None:
    with self._guard() as handlers:
      handlers[path] = handler

  def remove(self, path: Path) -> bool:
    with self._guard() as handlers:
      return handlers.pop(path, None) is not None

  def clear(self) -> None:
    # drops all state, so allowed on a poisoned registry
    with self._lock:
      self._handlers.clear()

  # ─────────────────────────────────────────────────────────────────────────
  # Lookup
  # ─────────────────────────────────────────────────────────────────────────
  def lookup_ancestor(self, path: Path) -> Optional[Handler]:
    '''Handler of the most specific registered ancestor of *path*, if any.'''
    with self._guard() as handlers:
      for candidate in (path, *path.parents):
        log_matching_path(candidate)
        handler = handlers.get(candidate)
        if handler is not None:
          return handler
    return None

  def handler_for_event(self, event: ChangeEvent) -> Optional[Handler]:
    path = event.path
    if path is None:
      return None
    return self.lookup_ancestor(path)

  def paths(self) -> List[Path]:
    with self._guard() as handlers:
      return list(handlers)

  def __contains__(self, path: object) -> bool:
    with self._guard() as handlers:
      return path in handlers

  def __len__(self) -> int:
    with self._guard() as handlers:
      return len(handlers)
