"""
Configuration of the installed system from inside the target root.

handoff() serializes the frozen InstallConfig into an environment map and
returns a TargetContext. Every command the context runs goes through
arch-chroot with that map, so scripts refer to "$EASYINSTALL_HOSTNAME" and
friends instead of having user input pasted into them. Files are written
through the context with paths as seen from inside the target.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Callable

from easyinstall.context import InstallerContext
from easyinstall.errors import BestEffortError, PreconditionError, PreconditionKind
from easyinstall.files import (
  NVIDIA_MODPROBE,
  SUDOERS_DROPIN,
  SWAPFILE,
  USER_GROUPS,
  enable_locales,
  hosts_lines,
  locale_conf_lines,
  nvidia_modprobe_lines,
  sudoers_lines,
  swap_fstab_line,
  vconsole_lines,
)
from easyinstall.packages import lib32_packages
from easyinstall.tui import TUI
from easyinstall.types import GPUVendor, InstallConfig, PackagePlan
from easyinstall.utils import append, cmd, read, replace, scmd, write


class TargetContext:
  """Runs commands and writes files as if native to the target root."""

  def __init__(
    self,
    root: str,
    config: InstallConfig,
    plan: PackagePlan,
    dry: bool,
    ui: TUI,
    warnings: list[str],
  ) -> None:
    self.root: str = root
    self.config: InstallConfig = config
    self.plan: PackagePlan = plan
    self.env: dict[str, str] = config.to_env()
    self.dry: bool = dry
    self.ui: TUI = ui
    self.warnings: list[str] = warnings

  def path(self, path: str) -> str:
    """Host-side location of a path inside the target."""
    return f"{self.root.rstrip('/')}{path}"

  def _chroot(self, body: str) -> str:
    return f"arch-chroot {shlex.quote(self.root)} /bin/bash -e -c {shlex.quote(body)}"

  def run(self, body: str) -> None:
    cmd(self._chroot(body), self.dry, self.ui, self.env)

  def feed(self, body: str, stdin_data: str) -> None:
    scmd(self._chroot(body), stdin_data, self.dry, self.ui, self.env)

  def read(self, path: str) -> str | None:
    return read(self.path(path))

  def write(self, path: str, lines: list[str], mode: int | None = None) -> None:
    if not self.dry:
      os.makedirs(os.path.dirname(self.path(path)), exist_ok=True)
    write(lines, self.path(path), self.dry, self.ui, mode)

  def append(self, path: str, lines: list[str]) -> None:
    append(lines, self.path(path), self.dry, self.ui)

  def patch(self, path: str, text: str, previous: str) -> None:
    replace(text, self.path(path), self.dry, self.ui, previous)

  def is_mountpoint(self, path: str) -> bool:
    """Ask from inside the target; host mounts are not guaranteed to be visible there."""
    if self.dry:
      self.ui.print(f"[bold green][dim][DRY RUN] mountpoint -q {path} (inside {self.root})[/][/]")
      return True

    result = subprocess.run(
      ["arch-chroot", self.root, "mountpoint", "-q", path],
      env={**os.environ, **self.env},
      check=False,
    )
    return result.returncode == 0

  def warn(self, message: str) -> None:
    self.warnings.append(message)
    self.ui.print(f"[bold yellow]WARNING:[/] {message}")


def handoff(ctx: InstallerContext, warnings: list[str]) -> TargetContext:
  """Hand the confirmed settings over to the target execution context."""
  assert ctx.ui is not None
  assert ctx.record is not None
  assert ctx.plan is not None

  target = TargetContext(ctx.target, ctx.record, ctx.plan, ctx.dry, ctx.ui, warnings)
  names = ", ".join(sorted(target.env))
  ctx.ui.print(f"Configuring installed system in {target.root} (arch-chroot) with {names}")
  return target


def set_timezone(target: TargetContext) -> None:
  target.run('ln -sf "/usr/share/zoneinfo/$EASYINSTALL_TIMEZONE" /etc/localtime')
  target.run("hwclock --systohc")


def set_locale(target: TargetContext) -> None:
  config = target.config
  previous = target.read("/etc/locale.gen") or ""
  text, missing = enable_locales(previous, config.locales)

  for entry in missing:
    target.warn(f"Locale '{entry}' not found in /etc/locale.gen - not generated")

  if text != previous:
    target.patch("/etc/locale.gen", text, previous)

  target.run("locale-gen")
  target.write("/etc/locale.conf", locale_conf_lines(config.language))
  target.write("/etc/vconsole.conf", vconsole_lines(config.keymap))


def set_hostname(target: TargetContext) -> None:
  target.write("/etc/hostname", [target.config.hostname])
  target.write("/etc/hosts", hosts_lines(target.config.hostname))


def create_users(target: TargetContext) -> None:
  config = target.config
  target.run(f'useradd -m -G {",".join(USER_GROUPS)} "$EASYINSTALL_USERNAME"')
  target.feed("chpasswd", f"{config.username}:{config.user_password}\n")

  if config.root_password is not None:
    target.feed("chpasswd", f"root:{config.root_password}\n")


def grant_sudo(target: TargetContext) -> None:
  target.write(SUDOERS_DROPIN, sudoers_lines(), mode=0o440)


def enable_network(target: TargetContext) -> None:
  target.run("systemctl enable NetworkManager")


def configure_swap(target: TargetContext) -> None:
  size_gb = target.config.swap_gb
  if size_gb == 0:
    target.ui.print("No swapfile requested")
    return

  target.run(f"fallocate -l {size_gb * 1024**3} {SWAPFILE}")
  target.run(f"chmod 600 {SWAPFILE}")
  target.run(f"mkswap {SWAPFILE}")
  target.run(f"swapon {SWAPFILE}")
  target.append("/etc/fstab", [swap_fstab_line()])


def configure_nvidia(target: TargetContext) -> None:
  target.write(NVIDIA_MODPROBE, nvidia_modprobe_lines())


def build_initramfs(target: TargetContext) -> None:
  target.run("mkinitcpio -P")


def install_bootloader(target: TargetContext) -> None:
  esp = target.config.esp
  if not target.is_mountpoint(esp):
    raise PreconditionError(
      PreconditionKind.BOOT_PARTITION_NOT_MOUNTED,
      f"{esp} is not a mount point inside {target.root} - cannot install GRUB",
    )

  target.run('grub-install --target=x86_64-efi --efi-directory="$EASYINSTALL_ESP" --bootloader-id=GRUB --recheck')
  target.run("grub-mkconfig -o /boot/grub/grub.cfg")


def enable_display_manager(target: TargetContext) -> None:
  target.run(f"systemctl enable {shlex.quote(target.plan.display_manager)}")


def _best_effort(target: TargetContext, body: str) -> None:
  try:
    target.run(body)

  except subprocess.CalledProcessError as e:
    raise BestEffortError(f"'{body}' failed (exit {e.returncode}) - continuing") from e


def install_gaming_stack(target: TargetContext) -> None:
  target.run("pacman -Sy --noconfirm")
  target.run("pacman -S --noconfirm steam")

  # lib32 graphics bits (useful for Steam/Proton)
  for pkg in lib32_packages(target.config.gpu):
    try:
      _best_effort(target, f"pacman -S --noconfirm {pkg}")

    except BestEffortError as e:
      target.warn(str(e))


def get_target_steps(config: InstallConfig, plan: PackagePlan) -> list[Callable[[TargetContext], None]]:
  """Target-side steps in execution order; the conditional ones only when they apply."""
  steps: list[Callable[[TargetContext], None]] = [
    set_timezone,
    set_locale,
    set_hostname,
    create_users,
    grant_sudo,
    enable_network,
    configure_swap,
  ]

  if config.gpu in (GPUVendor.NVIDIA, GPUVendor.HYBRID):
    steps.append(configure_nvidia)

  steps += [build_initramfs, install_bootloader]

  if plan.display_manager:
    steps.append(enable_display_manager)

  if config.gaming:
    steps.append(install_gaming_stack)

  return steps
