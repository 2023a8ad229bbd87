import json
import os
import subprocess
import sys
from collections.abc import Mapping

from rich.markup import escape

from easyinstall.transcript import console
from easyinstall.tui import TUI
from easyinstall.types import DefaultsConfig, LocalePreset
from easyinstall.validations import validate_defaults_json, validate_presets_json


def get_resource_path(relative_path: str) -> str:
  """Absolute path of a data file shipped inside the easyinstall package."""
  return os.path.join(os.path.dirname(os.path.abspath(__file__)), relative_path)


def cmd(command: str, dry_run: bool, ui: TUI, env: Mapping[str, str] | None = None) -> None:
  """
  Run a shell command, streaming its output through the UI.

  Raises:
      subprocess.CalledProcessError: if the command exits non-zero
  """
  if dry_run:
    ui.print(f"[bold green][dim][DRY RUN] {escape(command)}[/][/]")
    return

  ui.print(f"[dim]$ {escape(command)}[/]")
  with subprocess.Popen(
    command,
    shell=True,
    stdout=subprocess.PIPE,
    stderr=subprocess.STDOUT,
    text=True,
    env={**os.environ, **env} if env else None,
  ) as process:
    assert process.stdout is not None
    for line in process.stdout:
      ui.print(escape(line.rstrip()))

  if process.returncode != 0:
    raise subprocess.CalledProcessError(process.returncode, command)


def scmd(command: str, stdin_data: str, dry_run: bool, ui: TUI, env: Mapping[str, str] | None = None) -> None:
  """Execute a command with sensitive stdin data without exposing it in process list."""
  if dry_run:
    ui.print(f"[bold green][dim][DRY RUN] {escape(command)} (with stdin data)[/][/]")
    return

  ui.print(f"[dim]$ {escape(command)} (with stdin data)[/]")
  with subprocess.Popen(
    command,
    shell=True,
    stdin=subprocess.PIPE,
    stdout=subprocess.PIPE,
    stderr=subprocess.PIPE,
    text=True,
    env={**os.environ, **env} if env else None,
  ) as process:
    stdout, stderr = process.communicate(input=stdin_data)

  for output in (stdout, stderr):
    for line in output.splitlines():
      ui.print(escape(line))

  if process.returncode != 0:
    raise subprocess.CalledProcessError(process.returncode, command, output=stdout, stderr=stderr)


def write(lines: list[str], path: str, dry_run: bool, ui: TUI, mode: int | None = None) -> None:
  assert isinstance(lines, list)
  if dry_run:
    ui.print(f"[bold green][dim][DRY RUN] Writing to {escape(path)}:[/][/]")
    for line in lines:
      ui.print(f"[dim]{escape(line)}[/]")
    return

  def opener(file: str, flags: int) -> int:
    if mode is None:
      return os.open(file, flags)
    # Created with the final mode; an existing file is narrowed before any write
    fd = os.open(file, flags, mode)
    os.fchmod(fd, mode)
    return fd

  with open(path, "w", opener=opener) as f:
    for line in lines:
      print(line, file=f)


def append(lines: list[str], path: str, dry_run: bool, ui: TUI) -> None:
  assert isinstance(lines, list)
  if dry_run:
    ui.print(f"[bold green][dim][DRY RUN] Appending to {escape(path)}:[/][/]")
    for line in lines:
      ui.print(f"[dim]{escape(line)}[/]")
    return

  with open(path, "a") as f:
    for line in lines:
      print(line, file=f)


def _load_config_section(section: str) -> object:
  config_file = get_resource_path("config.json")
  try:
    with open(config_file, "r") as f:
      config_data = json.load(f)
      return config_data[section]

  except (FileNotFoundError, json.JSONDecodeError) as e:
    console.print(f"\n[bold red]Error loading config.json: {e}[/]")
    sys.exit(1)

  except KeyError as e:
    console.print(f"\n[bold red]Invalid config.json format: missing section {e}[/]")
    sys.exit(1)


def load_defaults() -> DefaultsConfig:
  """Load default values from the packaged config.json."""
  try:
    data = validate_defaults_json(_load_config_section("defaults"))

  except (KeyError, ValueError) as e:
    console.print(f"\n[bold red]Invalid config.json format: {e}[/]")
    sys.exit(1)

  return DefaultsConfig(
    target=data["target"],
    transcript=data["transcript"],
    timezone=data["timezone"],
    keymap=data["keymap"],
    preset=data["preset"],
  )


def load_locale_presets() -> list[LocalePreset]:
  """Load the locale presets offered during setup."""
  try:
    data = validate_presets_json(_load_config_section("locale_presets"))

  except ValueError as e:
    console.print(f"\n[bold red]Invalid config.json format: {e}[/]")
    sys.exit(1)

  return [
    LocalePreset(
      name=str(item["name"]),
      locales=[str(locale) for locale in item["locales"]],
      language=str(item["language"]),
      keymap=str(item["keymap"]),
    )
    for item in data
  ]


def format_step_name(name: str) -> str:
  """
  Format step name from function name string.

  Args:
      name: Step function name

  Returns:
      Formatted step name (e.g., "Bulk Install")
  """
  return name.replace("step_", "").replace("_", " ").title().lstrip("0123456789 ")


def read(path: str) -> str | None:
  """Return the file text, or None when the file does not exist."""
  try:
    with open(path, "r") as f:
      return f.read()

  except FileNotFoundError:
    return None


def replace(text: str, path: str, dry_run: bool, ui: TUI, previous: str = "") -> None:
  """Overwrite a file with new text. In dry run, show only the lines that change."""
  if dry_run:
    ui.print(f"[bold green][dim][DRY RUN] Patching {escape(path)}:[/][/]")
    for old, new in zip(previous.splitlines(), text.splitlines()):
      if old != new:
        ui.print(f"[dim]{escape(old)} -> {escape(new)}[/]")
    return

  with open(path, "w") as f:
    _ = f.write(text)
