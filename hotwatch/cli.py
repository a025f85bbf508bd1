# cli.py
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .blocking import Flow, Hotwatch
from .config import DEFAULT_DELAY, Config
from .errors import Error
from .event import ChangeEvent


def parse_argv(argv: Optional[List[str]] = None) -> argparse.Namespace:
  '''
  Parse command-line arguments for *hotwatch*.

  Parameters
  ----------
  argv
    A custom argument list (mainly for testing).  When None the
    function uses ``sys.argv[1:]`` automatically.

  Returns
  -------
  argparse.Namespace
    • paths          : Files / directories to watch
    • delay          : Coalescing delay in seconds
    • exit_on_change : Bool flag - return after the first modification
    • recursive      : Bool - watch directories recursively
    • verbose        : Verbosity count (-v, -vv, …)
  '''
  parser = argparse.ArgumentParser(
      prog='hotwatch',
      description='Print debounced filesystem events for the given paths.',
  )

  parser.add_argument(
      'paths',
      nargs='+',
      type=Path,
      metavar='PATH',
      help='File or directory to watch.',
  )

  parser.add_argument(
      '--delay',
      '-d',
      type=float,
      default=DEFAULT_DELAY,
      metavar='SEC',
      help=f'Coalescing delay (default: {DEFAULT_DELAY} s).',
  )

  parser.add_argument(
      '--exit-on-change',
      '-x',
      action='store_true',
      help='Exit as soon as a watched file is modified.',
  )

  parser.add_argument(
      '--no-recursive',
      dest='recursive',
      action='store_false',
      help='Only watch the top level of directories.',
  )

  parser.add_argument(
      '--verbose',
      '-v',
      action='count',
      default=0,
      help='Increase logging verbosity; repeat for more detail.',
  )

  try:
    import argcomplete
    argcomplete.autocomplete(parser)
  except ImportError:
    pass
  args = parser.parse_args(argv)
  if args.delay < 0:
    parser.error('--delay must be non-negative')
  return args


def format_event(event: ChangeEvent) -> str:
  line = f'{event.kind.value} {event.paths[0]}'
  if len(event.paths) > 1:
    line += f' -> {event.paths[1]}'
  return line


def _configure_logging(verbose: int) -> None:
  level = logging.WARNING
  if verbose == 1:
    level = logging.INFO
  elif verbose > 1:
    level = logging.DEBUG
  logging.basicConfig(level=level, format='%(asctime)s %(name)s %(levelname)s %(message)s')


def main(argv: Optional[List[str]] = None, out: TextIO = sys.stdout) -> int:
  args = parse_argv(argv)
  _configure_logging(args.verbose)

  def on_event(event: ChangeEvent) -> Flow:
    print(format_event(event), file=out, flush=True)
    if args.exit_on_change and event.modified:
      return Flow.EXIT
    return Flow.CONTINUE

  cfg = Config(delay=args.delay, recursive=args.recursive)
  with Hotwatch(cfg=cfg) as hw:
    for path in args.paths:
      try:
        hw.watch(path, on_event)
      except Error as exc:
        print(f'hotwatch: {exc}', file=sys.stderr)
        return 1
    try:
      hw.run()
    except KeyboardInterrupt:
      pass
  return 0
