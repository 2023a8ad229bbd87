import logging
import os
from pathlib import Path
from typing import Any, override

from rich.console import Console
from rich.text import Text

DEFAULT_TRANSCRIPT_PATH = "/var/log/arch-easyinstall.log"

logger = logging.getLogger("easyinstall")


class TranscriptConsole(Console):
  """
  A rich Console that also logs the plain text of every printed string.

  Renderables other than strings (panels, live display control codes) are
  only drawn on the terminal.
  """

  @override
  def print(self, *objects: Any, sep: str = " ", end: str = "\n", **kwargs: Any) -> None:
    super().print(*objects, sep=sep, end=end, **kwargs)

    text = sep.join(o for o in objects if isinstance(o, str))
    if kwargs.get("markup") is not False:
      text = Text.from_markup(text).plain

    for line in text.strip("\n").splitlines():
      if line.strip():
        logger.info("%s", line)


console = TranscriptConsole()


def configure_transcript(path: str = DEFAULT_TRANSCRIPT_PATH) -> str:
  """
  Append everything the installer prints to a plain text transcript.

  The transcript only goes to the file; the terminal is handled by rich.
  If the requested location cannot be written (read-only live media, no
  permission) a file in the working directory is used instead.

  Returns the actual file path being used.
  """
  # Avoid duplicate handlers if configure_transcript() is called multiple times.
  for handler in logger.handlers:
    if isinstance(handler, logging.FileHandler):
      return handler.baseFilename

  fmt = logging.Formatter(fmt="%(asctime)s %(message)s", datefmt="%Y-%m-%dT%H:%M:%S%z")

  try:
    Path(os.path.dirname(path) or ".").mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, mode="a")

  except OSError:
    path = str(Path.cwd() / os.path.basename(DEFAULT_TRANSCRIPT_PATH))
    handler = logging.FileHandler(path, mode="a")

  handler.setFormatter(fmt)
  logger.addHandler(handler)
  logger.setLevel(logging.INFO)
  logger.propagate = False

  logger.info("Transcript started (%s)", path)
  return path
