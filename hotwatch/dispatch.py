# dispatch.py
'''Routing of debounced events to registered handlers.'''

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .debounce import Channel, DebounceResult, Disconnected
from .event import ChangeEvent

if TYPE_CHECKING:
  from .registry import PathRegistry

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Diagnostics
# ─────────────────────────────────────────────────────────────────────────────
def log_event(event: ChangeEvent) -> None:
  logger.debug('received event: %r', event)


def log_error(err: BaseException) -> None:
  logger.error('error in event stream: %s', err)


def log_matching_path(path: Path) -> None:
  logger.debug('matching against %s', path)


def log_dead() -> None:
  logger.debug('sender disconnected, the watcher is dead')


# ─────────────────────────────────────────────────────────────────────────────
# Router
# ─────────────────────────────────────────────────────────────────────────────
def route(event: ChangeEvent, registry: PathRegistry) -> object:
  '''
  Invoke the most specific handler for *event* and return its result.
  Returns None when nothing is registered at or above the event's path.
  The registry lock is released before the handler runs.
  '''
  log_event(event)
  handler = registry.handler_for_event(event)
  if handler is None:
    return None
  return handler(event)


def dispatch_forever(registry: PathRegistry, rx: Channel) -> None:
  '''Route batches from *rx* until the sender goes away.'''
  while True:
    try:
      result: DebounceResult = rx.recv()
    except Disconnected:
      log_dead()
      return
    if result.ok:
      for event in result.events:
        route(event, registry)
    else:
      for err in result.errors:
        log_error(err)
