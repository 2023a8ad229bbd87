from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import Any

import pytest
from rich.text import Text

from easyinstall.context import InstallerContext
from easyinstall.packages import resolve
from easyinstall.transcript import logger
from easyinstall.types import (
  ContextConfig,
  CPUVendor,
  Desktop,
  GPUVendor,
  InstallConfig,
  Kernel,
  LocaleEntry,
)

BASE_CONFIG = InstallConfig(
  hostname="archbox",
  username="alice",
  user_password="secret",
  timezone="Europe/Amsterdam",
  locales=(LocaleEntry("en_US.UTF-8", "UTF-8"),),
  language="en_US.UTF-8",
  keymap="us",
  kernels=(Kernel.LINUX,),
  desktop=Desktop.NONE,
  gpu=GPUVendor.AMD,
  cpu=CPUVendor.AMD,
  esp="/boot/efi",
)


class FakeUI:
  """Stands in for TUI and keeps everything printed as plain text."""

  def __init__(self) -> None:
    self.lines: list[str] = []
    self.statuses: list[str] = []

  def initialize(self) -> None:
    pass

  def cleanup(self) -> None:
    pass

  def update_status(self, message: str, step_name: str = "") -> None:
    self.statuses.append(step_name)

  def print(self, message: str) -> None:
    self.lines.append(Text.from_markup(message).plain)

  @property
  def output(self) -> str:
    return "\n".join(self.lines)


@pytest.fixture
def ui() -> FakeUI:
  return FakeUI()


@pytest.fixture
def make_config() -> Callable[..., InstallConfig]:
  def _make(**overrides: Any) -> InstallConfig:
    return replace(BASE_CONFIG, **overrides)

  return _make


@pytest.fixture
def make_ctx(tmp_path: Path, ui: FakeUI) -> Callable[..., InstallerContext]:
  """An InstallerContext that has passed the settings step, targeting tmp_path."""

  def _make(record: InstallConfig, dry: bool = True) -> InstallerContext:
    ctx = InstallerContext(ContextConfig(dry=dry, target=str(tmp_path), transcript="", timezone="UTC"))
    ctx.ui = ui  # type: ignore[assignment]
    ctx.esp = record.esp
    ctx.record = record
    ctx.plan = resolve(record)
    return ctx

  return _make


@pytest.fixture
def transcript_handlers():
  """Detach and close transcript handlers added during the test."""
  yield
  for handler in list(logger.handlers):
    logger.removeHandler(handler)
    handler.close()
