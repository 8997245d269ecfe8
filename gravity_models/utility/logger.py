"""
Logger Utility
==============

Copies the terminal output (stdout and stderr) of a run to a log file.

Usage:
  context = start_logging(Path('run.log'))
  try:
    ...
  finally:
    stop_logging(context)
"""
import sys

from pathlib import Path
from typing  import Optional, TextIO


class TeeStream:
  """
  A stream that writes to a terminal stream and to a shared log file.
  """
  def __init__(
    self,
    terminal : TextIO,
    log_file : TextIO,
  ):
    self.terminal = terminal
    self.log_file = log_file

  def write(self, message: str) -> int:
    self.terminal.write(message)
    self.log_file.write(message)
    self.log_file.flush()
    return len(message)

  def flush(self) -> None:
    self.terminal.flush()
    self.log_file.flush()

  def isatty(self) -> bool:
    return False


class LoggerContext:
  """
  Context to hold logger state for cleanup.
  """
  def __init__(
    self,
    log_file        : TextIO,
    log_filepath    : Path,
    original_stdout : TextIO,
    original_stderr : TextIO,
  ):
    self.log_file        = log_file
    self.log_filepath    = log_filepath
    self.original_stdout = original_stdout
    self.original_stderr = original_stderr


def start_logging(
  log_filepath : Path,
) -> LoggerContext:
  """
  Start logging terminal output (stdout and stderr) to a file.

  Input:
  ------
    log_filepath : Path
      Path to the log file. Parent folders are created if needed.

  Output:
  -------
    context : LoggerContext
      Context object for cleanup.
  """
  log_filepath = Path(log_filepath)
  log_filepath.parent.mkdir(parents=True, exist_ok=True)

  # Store original streams
  original_stdout = sys.stdout
  original_stderr = sys.stderr

  # Both streams share one file so their output stays in order
  log_file = open(log_filepath, 'w', encoding='utf-8')

  sys.stdout = TeeStream(original_stdout, log_file)
  sys.stderr = TeeStream(original_stderr, log_file)

  return LoggerContext(
    log_file,
    log_filepath,
    original_stdout,
    original_stderr,
  )


def stop_logging(
  context : Optional[LoggerContext],
) -> None:
  """
  Stop logging and restore original stdout/stderr.

  Input:
  ------
    context : LoggerContext | None
      Context object from start_logging.

  Output:
  -------
    None
  """
  if context is None:
    return

  # Restore original streams
  sys.stdout = context.original_stdout
  sys.stderr = context.original_stderr

  context.log_file.close()
