"""
Pre-flight checks for easyinstall.

Everything here only reads the live environment. A failed check raises
PreconditionError before a single byte of the target has been touched.
"""

import os
from collections.abc import Callable
from textwrap import dedent

from easyinstall.errors import PreconditionError, PreconditionKind
from easyinstall.types import ESP_CANDIDATES

EFI_FIRMWARE_DIR = "/sys/firmware/efi"


def running_as_root() -> bool:
  return os.geteuid() == 0


def booted_in_uefi() -> bool:
  return os.path.isdir(EFI_FIRMWARE_DIR)


def validate(
  target: str = "/mnt",
  *,
  is_root: Callable[[], bool] = running_as_root,
  is_mountpoint: Callable[[str], bool] = os.path.ismount,
  is_uefi: Callable[[], bool] = booted_in_uefi,
) -> str:
  """
  Check that the live environment can install into `target`.

  Checks run in order and stop at the first failure: root privileges, target
  mounted, UEFI boot, EFI system partition mounted inside the target.

  Returns:
      The ESP mount path relative to the target, "/boot/efi" or "/efi"

  Raises:
      PreconditionError: with the kind of the first failing check
  """
  if not is_root():
    raise PreconditionError(
      PreconditionKind.INSUFFICIENT_PRIVILEGE,
      "Root privileges are required.",
      "Please re-run the script as root (use sudo).",
    )

  if not is_mountpoint(target):
    raise PreconditionError(
      PreconditionKind.TARGET_NOT_MOUNTED,
      f"{target} is not mounted.",
      f"You must mount your root partition to {target} first.",
    )

  if not is_uefi():
    raise PreconditionError(
      PreconditionKind.UNSUPPORTED_BOOT_MODE,
      "UEFI not detected - BIOS/Legacy boot is not supported.",
      "Reboot the installation media in UEFI mode and re-run.",
    )

  for esp in ESP_CANDIDATES:
    if is_mountpoint(f"{target.rstrip('/')}{esp}"):
      return esp

  candidates = " or ".join(f"{target.rstrip('/')}{esp}" for esp in ESP_CANDIDATES)
  raise PreconditionError(
    PreconditionKind.BOOT_PARTITION_NOT_MOUNTED,
    f"UEFI detected, but the ESP is NOT mounted to {candidates}.",
    dedent(f"""\
      Mount your EFI partition (FAT32) and re-run.
      Example:
        mkdir -p {target.rstrip('/')}/boot/efi
        mount /dev/<esp-partition> {target.rstrip('/')}/boot/efi"""),
  )
