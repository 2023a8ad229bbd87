"""
Type definitions for easyinstall.

This module contains the closed choice sets, the resolved installation record
and the package plan derived from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, TypedDict

SWAP_SIZES: tuple[int, ...] = (0, 2, 4, 8)
ESP_CANDIDATES: tuple[str, ...] = ("/boot/efi", "/efi")


class DefaultsConfig(TypedDict):
  """Configuration defaults loaded from config.json."""

  target: str
  transcript: str
  timezone: str
  keymap: str
  preset: str


class LocalePreset(TypedDict):
  """A named bundle of locales with the matching LANG and console keymap."""

  name: str
  locales: list[str]
  language: str
  keymap: str


class Kernel(Enum):
  """Kernel variants available from the official repositories."""

  LINUX = "linux"
  LTS = "linux-lts"
  ZEN = "linux-zen"

  @property
  def headers(self) -> str:
    return f"{self.value}-headers"


class Desktop(Enum):
  NONE = "none"
  GNOME = "GNOME"
  PLASMA = "KDE Plasma"
  XFCE = "XFCE"
  I3 = "i3"


class GPUVendor(Enum):
  """Enumeration of GPU driver choices."""

  INTEL = "intel"
  AMD = "amd"
  NVIDIA = "nvidia"
  HYBRID = "intel+nvidia"
  NOUVEAU = "nouveau"
  SKIP = "skip"
  UNKNOWN = "unknown"


class CPUVendor(Enum):
  INTEL = "intel"
  AMD = "amd"
  UNKNOWN = "unknown"


class LocaleEntry(NamedTuple):
  """One line of /etc/locale.gen, e.g. ("en_US.UTF-8", "UTF-8")."""

  name: str
  charset: str

  def __str__(self) -> str:
    return f"{self.name} {self.charset}"


@dataclass
class ContextConfig:
  """Typed configuration object with all command line arguments."""

  dry: bool
  target: str
  transcript: str
  timezone: str
  keymap: str | None = None
  hostname: str | None = None


@dataclass(frozen=True)
class InstallConfig:
  """
  The resolved set of choices for one run.

  Built once after all prompts are answered and never changed afterwards.
  Both the package resolver and every installation step read from it.
  """

  hostname: str
  username: str
  user_password: str
  timezone: str
  locales: tuple[LocaleEntry, ...]
  language: str
  keymap: str
  kernels: tuple[Kernel, ...]
  desktop: Desktop
  gpu: GPUVendor
  cpu: CPUVendor
  esp: str
  swap_gb: int = 0
  gaming: bool = False
  root_password: str | None = None

  def __post_init__(self) -> None:
    for label, value in [
      ("hostname", self.hostname),
      ("username", self.username),
      ("user password", self.user_password),
      ("timezone", self.timezone),
      ("language", self.language),
      ("keymap", self.keymap),
    ]:
      if not value:
        raise ValueError(f"{label} must not be empty")

    if self.root_password == "":
      raise ValueError("root password must not be empty when set")
    if not self.locales:
      raise ValueError("at least one locale must be selected")
    if not self.kernels:
      raise ValueError("at least one kernel must be selected")
    if len(set(self.kernels)) != len(self.kernels):
      raise ValueError("kernels must not repeat")
    if self.swap_gb not in SWAP_SIZES:
      raise ValueError(f"swap size must be one of {SWAP_SIZES}, got {self.swap_gb}")
    if self.esp not in ESP_CANDIDATES:
      raise ValueError(f"EFI mount path must be one of {ESP_CANDIDATES}, got {self.esp}")

  def to_env(self) -> dict[str, str]:
    """Serialize the record into the environment map handed to the target context."""
    env = {
      "EASYINSTALL_HOSTNAME": self.hostname,
      "EASYINSTALL_USERNAME": self.username,
      "EASYINSTALL_USER_PASSWORD": self.user_password,
      "EASYINSTALL_TIMEZONE": self.timezone,
      "EASYINSTALL_LOCALES": ",".join(str(entry) for entry in self.locales),
      "EASYINSTALL_LANG": self.language,
      "EASYINSTALL_KEYMAP": self.keymap,
      "EASYINSTALL_KERNELS": " ".join(kernel.value for kernel in self.kernels),
      "EASYINSTALL_DESKTOP": self.desktop.value,
      "EASYINSTALL_GPU": self.gpu.value,
      "EASYINSTALL_CPU": self.cpu.value,
      "EASYINSTALL_ESP": self.esp,
      "EASYINSTALL_SWAP_GB": str(self.swap_gb),
      "EASYINSTALL_GAMING": "yes" if self.gaming else "no",
    }
    if self.root_password is not None:
      env["EASYINSTALL_ROOT_PASSWORD"] = self.root_password
    return env


@dataclass(frozen=True)
class PackagePlan:
  """Everything the installation derives from an InstallConfig."""

  packages: tuple[str, ...]
  display_manager: str
  microcode: str
  needs_multilib: bool
