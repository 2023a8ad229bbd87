#!/usr/bin/env python3

import argparse
import sys
from argparse import Namespace
from textwrap import dedent
from typing import override

from rich.markup import escape

from easyinstall import __version__
from easyinstall.context import InstallerContext
from easyinstall.errors import PhaseError, PreconditionError
from easyinstall.preflight import validate
from easyinstall.sequencer import run_installation
from easyinstall.steps import step_0_settings
from easyinstall.transcript import configure_transcript, console
from easyinstall.tui import TUI
from easyinstall.types import ESP_CANDIDATES, ContextConfig, DefaultsConfig
from easyinstall.utils import load_defaults
from easyinstall.validations import validate_cli_arguments


class IndentedHelpFormatter(argparse.RawDescriptionHelpFormatter):
  def __init__(self, prog: str, **kwargs) -> None:
    super().__init__(prog, max_help_position=30, width=80, **kwargs)

  @override
  def _format_action_invocation(self, action: argparse.Action) -> str:
    options = action.option_strings
    if not options:
      return super()._format_action_invocation(action)

    parts: list[str] = []
    if len(options) == 1:
      parts.append(f"{'':4}{options[0]}")

    else:
      parts.append(f"{', '.join(options)}")

    if action.nargs != 0:
      default_metavar = self._get_default_metavar_for_optional(action)
      parts[-1] += f" {self._format_args(action, default_metavar)}"

    return parts[-1]


def _create_argument_parser(defaults: DefaultsConfig) -> argparse.ArgumentParser:
  """Create and configure the argument parser."""
  parser = argparse.ArgumentParser(
    formatter_class=IndentedHelpFormatter,
    description=dedent("""
      Arch Linux installer for a target that is already partitioned,
      formatted and mounted.

      Before running, mount the root partition to the target directory
      and the EFI system partition (FAT32) to <target>/boot/efi or
      <target>/efi. Only UEFI systems are supported.
    """),
    epilog=dedent("""
      Examples:
        %(prog)s --dry                        # Preview installation steps
        %(prog)s --timezone Europe/Moscow     # Default timezone for the prompt
        %(prog)s --target /mnt/arch           # Install into another mount point
    """),
  )

  _ = parser.add_argument(
    "-d",
    "--dry",
    action="store_true",
    help="preview installation steps without executing commands or writing files",
    dest="dry",
  )

  _ = parser.add_argument(
    "--target",
    metavar="PATH",
    type=str,
    default=defaults["target"],
    help="mount point of the target root [default: %(default)s]",
    dest="target",
  )

  _ = parser.add_argument(
    "-t",
    "--timezone",
    metavar="TIMEZONE",
    type=str,
    default=defaults["timezone"],
    help="default timezone in Region/City format [default: %(default)s]",
    dest="timezone",
  )

  _ = parser.add_argument(
    "-k",
    "--keymap",
    metavar="KEYMAP",
    type=str,
    default=None,
    help="default console keymap [default: from the locale preset]",
    dest="keymap",
  )

  _ = parser.add_argument(
    "--hostname",
    metavar="HOSTNAME",
    type=str,
    help="system hostname",
    dest="hostname",
  )

  _ = parser.add_argument(
    "--transcript",
    metavar="PATH",
    type=str,
    default=defaults["transcript"],
    help="file that receives a copy of all output [default: %(default)s]",
    dest="transcript",
  )

  _ = parser.add_argument("--version", action="version", version=f"arch-easyinstall {__version__}")

  return parser


def _create_context_config(args: Namespace) -> ContextConfig:
  """Create a typed ContextConfig from an argparse Namespace."""
  return ContextConfig(
    dry=bool(getattr(args, "dry", False)),
    target=str(getattr(args, "target", "/mnt")),
    transcript=str(getattr(args, "transcript")),
    timezone=str(getattr(args, "timezone", "UTC")),
    keymap=getattr(args, "keymap", None),
    hostname=getattr(args, "hostname", None),
  )


def _check_system_requirements(ctx: InstallerContext, warnings: list[str]) -> None:
  """Run the pre-flight checks; in dry mode failures only become warnings."""
  console.print("\n==> Pre-flight checks")
  try:
    ctx.esp = validate(ctx.target)

  except PreconditionError as e:
    if not ctx.dry:
      console.print(f"\n[prompt.invalid]ERROR: {escape(str(e))}[/]")
      if e.hint:
        console.print(escape(e.hint))
      sys.exit(1)

    warnings.append(f"{e} (ignored in dry run)")
    ctx.esp = ESP_CANDIDATES[0]
    console.print(f"[bold yellow]Skipping failed check in dry run:[/] {escape(str(e))}")
    return

  console.print(f"Boot mode: UEFI, EFI directory: {ctx.esp}")


def main() -> None:
  """Main entry point for the installer."""
  # Collect warnings to display at the end
  warnings: list[str] = []
  defaults = load_defaults()
  parser = _create_argument_parser(defaults)
  config = _create_context_config(parser.parse_args())

  errors = validate_cli_arguments(
    target=config.target,
    timezone=config.timezone,
    keymap=config.keymap,
    hostname=config.hostname,
  )

  if errors:
    console.print("\n[prompt.invalid]Invalid arguments provided:[/]")
    console.print("\n".join(f" • {err}" for err in errors))
    console.print("\n[yellow]Use --help for valid options[/]")
    sys.exit(1)

  transcript = configure_transcript(config.transcript)
  ctx = InstallerContext(config)
  ctx.ui = TUI()

  if config.dry:
    console.print("\n[bold yellow]DRY RUN MODE[/] - No actual changes will be made to your system")

  _check_system_requirements(ctx, warnings)
  step_0_settings(ctx, warnings)

  try:
    run_installation(ctx, warnings)

  except KeyboardInterrupt:
    ctx.ui.cleanup()
    raise

  except PhaseError as e:
    ctx.ui.cleanup()
    console.print(f"\n[prompt.invalid]Step '{e.phase}' failed with error: {escape(str(e.cause))}[/]")
    console.print("\n[prompt.invalid]Installation cannot continue.[/]")
    console.print(f"See {transcript} for the full output.")
    if ctx.dry:
      console.print("\n[prompt.invalid]This error occurred during dry run - actual installation might fail.[/]")
    sys.exit(1)

  ctx.ui.cleanup()

  if warnings:
    console.print("\n[bold yellow]Warnings:[/]")
    for warning in warnings:
      console.print(f" • {escape(warning)}")

  if config.dry:
    console.print("\n[bold green]Dry run completed successfully![/]")
    console.print("[bold green]Run without --dry flag to perform actual installation.[/]")
    console.print()
    return

  console.print("\n[bold green]All finished. Now run:[/]")
  console.print(f"  umount -R {ctx.target}")
  console.print("  reboot")
  console.print(f"\nTranscript: {transcript}")
  console.print()


def run() -> None:
  """Console script entry point."""
  try:
    main()

  except KeyboardInterrupt:
    console.print("\n[prompt.invalid]Installation interrupted. Exiting...[/]")
    sys.exit(130)

  except Exception as e:
    console.print(f"\n[prompt.invalid]Fatal error: {escape(str(e))}[/]")
    sys.exit(1)


if __name__ == "__main__":
  run()
