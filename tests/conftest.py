# conftest.py
'''
Shared fixtures: a fake watchdog observer so dispatch tests don't depend on
OS notification timing.
'''

from __future__ import annotations

from typing import Dict, List

import pytest
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers.api import ObservedWatch

from hotwatch.config import Config


class FakeObserver:
  '''Quacks like a watchdog observer; `emit` feeds events to the handlers.'''

  def __init__(self) -> None:
    self.watches: Dict[ObservedWatch, FileSystemEventHandler] = {}
    self.started = False
    self.stopped = False
    self.fail_schedule: Exception | None = None

  def start(self) -> None:
    self.started = True

  def stop(self) -> None:
    self.stopped = True

  def join(self, timeout: float | None = None) -> None:
    pass

  def schedule(self, handler, path, *, recursive=False):
    if self.fail_schedule is not None:
      raise self.fail_schedule
    watch = ObservedWatch(path, recursive=recursive)
    self.watches[watch] = handler
    return watch

  def unschedule(self, watch) -> None:
    del self.watches[watch]

  def scheduled(self) -> Dict[str, bool]:
    return {w.path: w.is_recursive for w in self.watches}

  def emit(self, event: FileSystemEvent) -> None:
    for handler in list(self.watches.values()):
      handler.dispatch(event)


@pytest.fixture
def observers() -> List[FakeObserver]:
  return []


@pytest.fixture
def fake_cfg(observers) -> Config:
  def factory() -> FakeObserver:
    obs = FakeObserver()
    observers.append(obs)
    return obs
  return Config(delay=0.05, tick=0.01, observer_factory=factory)
