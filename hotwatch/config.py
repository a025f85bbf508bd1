# config.py
from __future__ import annotations

from typing import Callable, Optional

from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from .errors import WatcherInitError


DEFAULT_DELAY = 2.0


# ─────────────────────────────────────────────────────────────────────────────
# Config — knobs for the debouncer and the native observer
# ─────────────────────────────────────────────────────────────────────────────
class Config:
  '''
  • delay            : coalescing delay in seconds
  • recursive        : watch directories recursively
  • tick             : debouncer flush interval (None → delay / 4)
  • observer_factory : builds the watchdog observer (swap in a fake for tests)
  '''

  def __init__(
    self,
    delay: float = DEFAULT_DELAY,
    recursive: bool = True,
    tick: Optional[float] = None,
    observer_factory: Callable[[], BaseObserver] = Observer,
  ) -> None:
    if delay < 0:
      raise WatcherInitError(f'delay must be non-negative, got {delay!r}')
    self.delay = delay
    self.recursive = recursive
    self.tick = tick
    self.observer_factory = observer_factory

  def with_delay(self, delay: float) -> 'Config':
    return Config(
      delay=delay,
      recursive=self.recursive,
      tick=self.tick,
      observer_factory=self.observer_factory,
    )
