import subprocess

import pytest

from easyinstall import chroot
from easyinstall.errors import PhaseError, PreconditionError, PreconditionKind
from easyinstall.sequencer import run_installation
from easyinstall.types import Desktop, GPUVendor

CORE_TARGET_STEPS = [
  "Set Timezone",
  "Set Locale",
  "Set Hostname",
  "Create Users",
  "Grant Sudo",
  "Enable Network",
  "Configure Swap",
]


def test_minimal_amd_scenario(make_config, make_ctx, ui):
  ctx = make_ctx(make_config())
  ran = run_installation(ctx, [])

  assert ran == [
    "Bulk Install",
    "Generate Fstab",
    "Handoff",
    *CORE_TARGET_STEPS,
    "Build Initramfs",
    "Install Bootloader",
  ]
  assert ui.statuses == ran
  assert f"pacstrap {ctx.target} base base-devel" in ui.output
  assert "amd-ucode mesa vulkan-radeon" in ui.output
  assert "grub-install --target=x86_64-efi" in ui.output
  assert "systemctl enable NetworkManager" in ui.output
  assert "nvidia" not in ui.output
  assert "steam" not in ui.output


def test_optional_steps_follow_the_settings(make_config, make_ctx):
  record = make_config(gpu=GPUVendor.HYBRID, desktop=Desktop.PLASMA, gaming=True, swap_gb=2)
  ran = run_installation(make_ctx(record), [])

  assert ran == [
    "Bulk Install",
    "Generate Fstab",
    "Enable Multilib",
    "Handoff",
    *CORE_TARGET_STEPS,
    "Configure Nvidia",
    "Build Initramfs",
    "Install Bootloader",
    "Enable Display Manager",
    "Install Gaming Stack",
  ]


def test_steps_run_in_dependency_order(make_config, make_ctx, ui):
  run_installation(make_ctx(make_config(gpu=GPUVendor.NVIDIA, desktop=Desktop.GNOME)), [])
  output = ui.output

  order = [
    "pacstrap",
    "genfstab",
    "/etc/localtime",
    "locale-gen",
    "useradd",
    "systemctl enable NetworkManager",
    "options nvidia_drm modeset=1",
    "mkinitcpio -P",
    "grub-install",
    "grub-mkconfig",
    "systemctl enable gdm",
  ]
  positions = [output.index(marker) for marker in order]
  assert positions == sorted(positions)


def test_no_swap_means_no_swapfile(make_config, make_ctx, ui):
  run_installation(make_ctx(make_config(swap_gb=0)), [])
  assert "swapfile" not in ui.output.replace("No swapfile requested", "")
  assert "swapon" not in ui.output


def test_swapfile_is_sized_in_bytes(make_config, make_ctx, ui):
  run_installation(make_ctx(make_config(swap_gb=8)), [])
  assert f"fallocate -l {8 * 1024**3} /swapfile" in ui.output
  assert "/swapfile none swap defaults 0 0" in ui.output


def test_secrets_stay_out_of_the_output(make_config, make_ctx, ui):
  run_installation(make_ctx(make_config(root_password="toor-secret", user_password="user-secret")), [])
  assert "chpasswd" in ui.output
  assert "secret" not in ui.output


def test_failure_stops_the_pipeline(make_config, make_ctx, ui, monkeypatch):
  monkeypatch.setattr(chroot.TargetContext, "is_mountpoint", lambda self, path: False)
  ctx = make_ctx(make_config(desktop=Desktop.GNOME))

  with pytest.raises(PhaseError) as exc:
    run_installation(ctx, [])

  assert exc.value.phase == "Install Bootloader"
  assert isinstance(exc.value.cause, PreconditionError)
  assert exc.value.cause.kind is PreconditionKind.BOOT_PARTITION_NOT_MOUNTED
  assert "grub-install" not in ui.output
  assert "systemctl enable gdm" not in ui.output


def test_lib32_failures_are_only_warnings(make_config, make_ctx, monkeypatch):
  ran_bodies: list[str] = []

  def run(self, body: str) -> None:
    ran_bodies.append(body)
    if body.startswith("pacman -S --noconfirm lib32-"):
      raise subprocess.CalledProcessError(1, body)

  monkeypatch.setattr(chroot.TargetContext, "run", run)
  warnings: list[str] = []
  ran = run_installation(make_ctx(make_config(gpu=GPUVendor.AMD, gaming=True)), warnings)

  assert ran[-1] == "Install Gaming Stack"
  assert ran_bodies[-4:] == [
    "pacman -Sy --noconfirm",
    "pacman -S --noconfirm steam",
    "pacman -S --noconfirm lib32-mesa",
    "pacman -S --noconfirm lib32-vulkan-radeon",
  ]
  assert len([w for w in warnings if "lib32" in w]) == 2


def test_steam_failure_is_fatal(make_config, make_ctx, monkeypatch):
  def run(self, body: str) -> None:
    if body == "pacman -S --noconfirm steam":
      raise subprocess.CalledProcessError(1, body)

  monkeypatch.setattr(chroot.TargetContext, "run", run)

  with pytest.raises(PhaseError) as exc:
    run_installation(make_ctx(make_config(gaming=True)), [])

  assert exc.value.phase == "Install Gaming Stack"
