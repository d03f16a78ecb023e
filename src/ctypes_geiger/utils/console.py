"""
Console and Logging Setup.

Reports are printed through ``console``, a stand-in for a ``rich`` Console whose
target can be replaced at runtime with ``set_console`` (the test suite installs
a recording console). Records of the standard ``logging`` module are rendered
by a ``RichHandler`` on the root logger. The handler writes to the report
console unless ``route_logs`` gives it a console of its own, which ``--json``
uses to keep log lines off stdout.
"""

import logging
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler


class _ConsoleProxy:
  """
  Forwards printing to a replaceable ``rich`` Console.

  Modules import the proxy once. Replacing the target re-attaches the logging
  handler, so log lines follow the report unless they are routed elsewhere.
  """

  def __init__(self) -> None:
    self._target: Console = Console()
    self._log_target: Optional[Console] = None
    self._attach_handler()

  def set_backend(self, new_console: Console) -> None:
    """
    Prints reports and log lines to ``new_console`` from now on.

    Args:
        new_console: The console to use.
    """
    self._target = new_console
    self._log_target = None
    self._attach_handler()

  def route_logs(self, log_console: Optional[Console]) -> None:
    """
    Gives log records a console of their own.

    Args:
        log_console: Destination of log lines, or None to log to the report console.
    """
    self._log_target = log_console
    self._attach_handler()

  def reset(self) -> None:
    self.set_backend(Console())

  def _attach_handler(self) -> None:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
      if isinstance(handler, RichHandler):
        root_logger.removeHandler(handler)

    root_logger.addHandler(
      RichHandler(
        console=self._log_target or self._target,
        show_time=False,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
      )
    )
    root_logger.setLevel(logging.INFO)

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._target.print(*args, **kwargs)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """Installs ``new_console`` for reports and log lines."""
  console.set_backend(new_console)


def reset_console() -> None:
  """Returns to a plain stdout console."""
  console.reset()


def log_warning(msg: str) -> None:
  """
  Logs a non-fatal problem.

  Args:
      msg: Rich markup; escape any text that comes from files or paths.
  """
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs a problem that ends the run.

  Args:
      msg: Rich markup; escape any text that comes from files or paths.
  """
  logging.error(f"❌ {msg}", extra={"markup": True})
