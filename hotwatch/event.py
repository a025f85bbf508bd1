# event.py
'''
ChangeEvent: one filesystem change as delivered to handlers.

The dispatch layer only looks at `ChangeEvent.path` (the first affected
path); the kind is for handlers to interpret.
'''

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from watchdog.events import FileSystemEvent


class EventKind(Enum):
  CREATE = 'create'
  MODIFY = 'modify'
  REMOVE = 'remove'
  ACCESS = 'access'
  OTHER = 'other'


_KINDS = {
  'created': EventKind.CREATE,
  'modified': EventKind.MODIFY,
  'moved': EventKind.MODIFY,
  'deleted': EventKind.REMOVE,
  'opened': EventKind.ACCESS,
  'closed': EventKind.ACCESS,
  'closed_no_write': EventKind.ACCESS,
}


@dataclass(frozen=True)
class ChangeEvent:
  paths: Tuple[Path, ...]
  kind: EventKind
  is_directory: bool = False
  detail: str = ''

  @property
  def path(self) -> Optional[Path]:
    return self.paths[0] if self.paths else None

  @property
  def created(self) -> bool:
    return self.kind is EventKind.CREATE

  @property
  def modified(self) -> bool:
    return self.kind is EventKind.MODIFY

  @property
  def removed(self) -> bool:
    return self.kind is EventKind.REMOVE

  @property
  def renamed(self) -> bool:
    return self.detail == 'moved'

  @property
  def accessed(self) -> bool:
    return self.kind is EventKind.ACCESS


def _as_path(raw) -> Optional[Path]:
  if not raw:
    return None
  return Path(os.fsdecode(raw))


def from_watchdog(event: FileSystemEvent) -> Optional[ChangeEvent]:
  '''Translate a raw watchdog event; `None` if it names no path.'''
  src = _as_path(event.src_path)
  if src is None:
    return None
  paths: Tuple[Path, ...] = (src,)
  dest = _as_path(getattr(event, 'dest_path', None))
  if dest is not None:
    paths += (dest,)
  return ChangeEvent(
    paths=paths,
    kind=_KINDS.get(event.event_type, EventKind.OTHER),
    is_directory=bool(event.is_directory),
    detail=event.event_type,
  )
