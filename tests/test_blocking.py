# test_blocking.py
'''
Tests for blocking.Hotwatch.run() and Flow.
'''

from __future__ import annotations

import logging
import threading
from pathlib import Path

import pytest
from watchdog.events import FileModifiedEvent

from hotwatch.blocking import Flow, Hotwatch
from hotwatch.debounce import DebounceResult
from hotwatch.event import ChangeEvent, EventKind


def _modify(path: Path) -> ChangeEvent:
  return ChangeEvent(paths=(path,), kind=EventKind.MODIFY)


@pytest.fixture
def hw(fake_cfg):
  w = Hotwatch(cfg=fake_cfg)
  yield w
  w.close()


@pytest.fixture
def root(tmp_path: Path) -> Path:
  return tmp_path.resolve()


def _run_in_thread(w: Hotwatch) -> threading.Thread:
  t = threading.Thread(target=w.run, daemon=True)
  t.start()
  return t


# ─────────────────────────────────────────────────────────────────────────────
# 1. Exit semantics
# ─────────────────────────────────────────────────────────────────────────────
def test_flow_default():
  assert Flow.default() is Flow.CONTINUE


def test_exit_stops_mid_batch(hw, root):
  seen = []

  def handler(event):
    seen.append(event.path.name)
    return Flow.EXIT if event.path.name == 'b' else Flow.CONTINUE

  hw.watch(root, handler)
  hw._rx.send(DebounceResult(events=[_modify(root / n) for n in ('a', 'b', 'c')]))
  hw._rx.send(DebounceResult(events=[_modify(root / 'd')]))
  hw.run()
  assert seen == ['a', 'b']


def test_continue_and_none_keep_running(hw, root):
  seen = []

  def handler(event):
    seen.append(event.path.name)
    if event.path.name == 'a':
      return None
    if event.path.name == 'b':
      return Flow.CONTINUE
    return Flow.EXIT

  hw.watch(root, handler)
  hw._rx.send(DebounceResult(events=[_modify(root / 'a')]))
  hw._rx.send(DebounceResult(events=[_modify(root / 'b')]))
  hw._rx.send(DebounceResult(events=[_modify(root / 'c')]))
  hw.run()
  assert seen == ['a', 'b', 'c']


def test_nothing_dispatched_before_run(hw, observers, root):
  seen = []
  hw.watch(root, lambda ev: seen.append(ev) or Flow.EXIT)
  observers[0].emit(FileModifiedEvent(str(root / 'x')))
  assert seen == []
  t = _run_in_thread(hw)
  t.join(2.0)
  assert not t.is_alive()
  assert [e.path for e in seen] == [root / 'x']


def test_unmatched_events_skipped(hw, root):
  sub = root / 'sub'
  sub.mkdir()
  seen = []
  hw.watch(sub, lambda ev: seen.append(ev.path) or Flow.EXIT)
  hw._rx.send(DebounceResult(events=[_modify(root / 'outside'), _modify(sub / 'in')]))
  hw.run()
  assert seen == [sub / 'in']


# ─────────────────────────────────────────────────────────────────────────────
# 2. Errors & disconnection
# ─────────────────────────────────────────────────────────────────────────────
def test_error_batch_logged_then_continue(hw, root, caplog):
  seen = []
  hw.watch(root, lambda ev: seen.append(ev) or Flow.EXIT)
  hw._rx.send(DebounceResult(errors=[OSError('inotify overflow')]))
  hw._rx.send(DebounceResult(events=[_modify(root / 'a')]))
  with caplog.at_level(logging.ERROR, logger='hotwatch'):
    hw.run()
  assert len(seen) == 1
  assert 'inotify overflow' in caplog.text


def test_run_returns_on_disconnect(hw, root):
  seen = []
  hw.watch(root, lambda ev: seen.append(ev))
  hw._rx.send(DebounceResult(events=[_modify(root / 'a')]))
  hw.close()
  hw.run()                          # drains, then sees the disconnect
  assert len(seen) == 1


def test_close_unblocks_waiting_run(hw):
  t = _run_in_thread(hw)
  hw.close()
  t.join(2.0)
  assert not t.is_alive()


def test_handler_exception_propagates(hw, root):
  def handler(event):
    raise ValueError('bad handler')

  hw.watch(root, handler)
  hw._rx.send(DebounceResult(events=[_modify(root / 'a')]))
  with pytest.raises(ValueError, match='bad handler'):
    hw.run()


def test_close_clears_registry(hw, root):
  hw.watch(root, lambda ev: Flow.EXIT)
  hw.close()
  assert len(hw._registry) == 0
  assert hw.closed
