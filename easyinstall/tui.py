import shutil
import sys
from collections import deque

from rich import box
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from easyinstall.transcript import console, logger

STEP_PREFIXES = {
  "Bulk Install": "^ ",
  "Generate Fstab": "# ",
  "Enable Multilib": "+ ",
  "Handoff": "> ",
  "Install Bootloader": "@ ",
  "Install Gaming Stack": "* ",
}

STATUS_STYLE = "bold blue"
BORDER_STYLE = "blue"

# Output kept for redrawing the scrolling area
OUTPUT_HISTORY = 500


class TUI:
  """
  Status panel on top, scrolling command output below.

  The live display only runs on a terminal and only between initialize()
  and cleanup(); otherwise messages are printed line by line. Either way
  their plain text reaches the transcript.
  """

  def __init__(self) -> None:
    self.enabled: bool = sys.stdout.isatty()
    self.active: bool = False
    self.live: Live | None = None
    self.output_lines: deque[str] = deque(maxlen=OUTPUT_HISTORY)

    self.layout: Layout = Layout()
    self.layout.split_column(
      Layout(name="status", size=3),
      Layout(name="output", ratio=1),
    )

  def initialize(self) -> None:
    self.active = self.enabled

  def _status_panel(self, text: str) -> Panel:
    return Panel(
      Text(text, style=STATUS_STYLE),
      border_style=BORDER_STYLE,
      padding=(0, 1),
      expand=False,
      box=box.SQUARE,
      title="arch-easyinstall",
      title_align="left",
    )

  def update_status(self, message: str, step_name: str = "") -> None:
    if not self.active:
      console.print(f"[{STATUS_STYLE}]{message}[/]")
      return

    logger.info("==> %s", Text.from_markup(message).plain)
    self.layout["status"].update(self._status_panel(f"{STEP_PREFIXES.get(step_name, '- ')}{message}"))

    if self.live is None:
      self.layout["output"].update("")
      self.live = Live(self.layout, console=console, refresh_per_second=10, screen=False)
      self.live.start()

  def print(self, message: str) -> None:
    if self.live is None:
      console.print(message)
      return

    logger.info("%s", Text.from_markup(message).plain)
    self.output_lines.append(message)

    # The status panel takes three lines
    visible = max(1, shutil.get_terminal_size().lines - 4)
    self.layout["output"].update(Text.from_markup("\n".join(list(self.output_lines)[-visible:])))

  def cleanup(self) -> None:
    if self.live is not None:
      self.live.stop()
      self.live = None
    self.active = False
