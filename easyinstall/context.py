from __future__ import annotations

from easyinstall.tui import TUI
from easyinstall.types import ContextConfig, InstallConfig, PackagePlan


class InstallerContext:
  """
  Holds the state and configuration for the installation process.

  This context object is passed between host-side installation steps. The
  command line options arrive first, the EFI mount path after the pre-flight
  checks, and the frozen InstallConfig with its PackagePlan once the user
  has confirmed the settings.
  """

  def __init__(self, config: ContextConfig) -> None:
    self.config: ContextConfig = config
    self.ui: TUI | None = None

    # Pre-flight result
    self.esp: str | None = None

    # User choices, frozen after confirmation
    self.record: InstallConfig | None = None
    self.plan: PackagePlan | None = None

  @property
  def dry(self) -> bool:
    """Access dry run flag from config."""
    return self.config.dry

  @property
  def target(self) -> str:
    """Target root without a trailing slash, e.g. "/mnt"."""
    return self.config.target.rstrip("/") or "/"
