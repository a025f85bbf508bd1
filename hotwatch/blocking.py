# blocking.py
'''
Blocking hotwatch.

Nothing is dispatched until `Hotwatch.run()` is called; `run()` then blocks
the calling thread until a handler returns `Flow.EXIT`. Handy when you just
want to wait for something to happen to a file:

    hw = Hotwatch()
    hw.watch('README.md', lambda ev: Flow.EXIT if ev.modified else Flow.CONTINUE)
    hw.run()
'''

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

from .debounce import DebounceResult, Disconnected
from .dispatch import log_dead, log_error, route
from .event import ChangeEvent
from .watcher import PathLike, _WatcherBase


class Flow(Enum):
  CONTINUE = 'continue'   # keep watching and blocking the thread
  EXIT = 'exit'           # stop watching, return from run()

  @classmethod
  def default(cls) -> 'Flow':
    return cls.CONTINUE


BlockingHandler = Callable[[ChangeEvent], Optional[Flow]]


class Hotwatch(_WatcherBase):
  '''Watches paths; handlers run on the thread that calls `run()`.'''

  def watch(self, path: PathLike, handler: BlockingHandler) -> None:
    '''
    Register *handler* for *path*. It won't be called until `run()`.
    A handler returning `Flow.EXIT` makes `run()` return; returning None
    is the same as `Flow.CONTINUE`.
    '''
    super().watch(path, handler)

  def run(self) -> None:
    '''Dispatch events until a handler returns `Flow.EXIT`.'''
    while True:
      try:
        result: DebounceResult = self._rx.recv()
      except Disconnected:
        log_dead()
        return
      if not result.ok:
        for err in result.errors:
          log_error(err)
        continue
      for event in result.events:
        if route(event, self._registry) is Flow.EXIT:
          return
