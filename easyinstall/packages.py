"""
Package selection for the target system.

resolve() turns an InstallConfig into a PackagePlan. Composition is additive
and in a fixed order so the same config always yields the same plan. Lists are
not deduplicated: pacstrap skips a package that is named twice.
"""

from easyinstall.types import CPUVendor, Desktop, GPUVendor, InstallConfig, Kernel, PackagePlan

DISPLAY_SERVER = ["xorg-server", "xorg-xinit"]
GRAPHICS_BASE = ["mesa"]
HYBRID_HELPER = "nvidia-prime"
NO_MICROCODE = "none"


def base_packages() -> list[str]:
  return [
    "base",
    "base-devel",
    "linux-firmware",
    "networkmanager",
    "sudo",
    "grub",
    "os-prober",
    "vim",
    "nano",
    "git",
    "wget",
    "curl",
    "efibootmgr",
    "dosfstools",
    "mtools",
  ]


def kernel_packages(kernels: tuple[Kernel, ...]) -> list[str]:
  return [pkg for kernel in kernels for pkg in (kernel.value, kernel.headers)]


def microcode_package(cpu: CPUVendor) -> str:
  match cpu:
    case CPUVendor.INTEL:
      return "intel-ucode"
    case CPUVendor.AMD:
      return "amd-ucode"
    case CPUVendor.UNKNOWN:
      return NO_MICROCODE


def gpu_packages(gpu: GPUVendor) -> list[str]:
  match gpu:
    case GPUVendor.INTEL:
      return ["vulkan-intel"]
    case GPUVendor.AMD:
      return ["vulkan-radeon"]
    case GPUVendor.NVIDIA:
      return ["dkms", "nvidia-dkms", "nvidia-utils", "nvidia-settings"]
    case GPUVendor.HYBRID:
      return [*gpu_packages(GPUVendor.INTEL), *gpu_packages(GPUVendor.NVIDIA), HYBRID_HELPER]
    case GPUVendor.NOUVEAU:
      return ["xf86-video-nouveau"]
    case GPUVendor.SKIP | GPUVendor.UNKNOWN:
      return []


def desktop_packages(desktop: Desktop) -> tuple[list[str], str]:
  """Return the desktop bundle and the display manager service that starts it."""
  match desktop:
    case Desktop.NONE:
      return [], ""
    case Desktop.GNOME:
      return ["gnome", "gdm"], "gdm"
    case Desktop.PLASMA:
      return ["plasma", "sddm"], "sddm"
    case Desktop.XFCE:
      return ["xfce4", "xfce4-goodies", "lightdm", "lightdm-gtk-greeter"], "lightdm"
    case Desktop.I3:
      return ["i3-wm", "i3status", "dmenu", "lightdm", "lightdm-gtk-greeter"], "lightdm"


def lib32_packages(gpu: GPUVendor) -> list[str]:
  """32-bit graphics libraries installed alongside Steam."""
  match gpu:
    case GPUVendor.INTEL:
      vendor = ["lib32-vulkan-intel"]
    case GPUVendor.AMD:
      vendor = ["lib32-vulkan-radeon"]
    case GPUVendor.NVIDIA:
      vendor = ["lib32-nvidia-utils"]
    case GPUVendor.HYBRID:
      vendor = ["lib32-vulkan-intel", "lib32-nvidia-utils"]
    case GPUVendor.NOUVEAU | GPUVendor.SKIP | GPUVendor.UNKNOWN:
      vendor = []

  return ["lib32-mesa", *vendor]


def resolve(config: InstallConfig) -> PackagePlan:
  packages = base_packages()
  packages += kernel_packages(config.kernels)

  microcode = microcode_package(config.cpu)
  if microcode != NO_MICROCODE:
    packages.append(microcode)

  if config.desktop is not Desktop.NONE:
    packages += DISPLAY_SERVER

  packages += GRAPHICS_BASE
  packages += gpu_packages(config.gpu)

  bundle, display_manager = desktop_packages(config.desktop)
  packages += bundle

  return PackagePlan(
    packages=tuple(packages),
    display_manager=display_manager,
    microcode=microcode,
    needs_multilib=config.gaming,
  )
