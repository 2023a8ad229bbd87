import sys
from collections.abc import Callable
from itertools import combinations

from easyinstall.context import InstallerContext
from easyinstall.files import enable_multilib
from easyinstall.hardware import detect_cpu_vendor, detect_gpu_vendor
from easyinstall.input import (
  HostnamePrompt,
  KeymapPrompt,
  LanguagePrompt,
  LocalesPrompt,
  PasswordPrompt,
  TimezonePrompt,
  UsernamePrompt,
  confirm,
  pick_one,
)
from easyinstall.packages import resolve
from easyinstall.transcript import console
from easyinstall.types import SWAP_SIZES, CPUVendor, Desktop, GPUVendor, InstallConfig, Kernel, PackagePlan
from easyinstall.utils import cmd, load_defaults, load_locale_presets, read, replace


GPU_CHOICES = [
  ("intel", GPUVendor.INTEL),
  ("amd", GPUVendor.AMD),
  ("nvidia (DKMS)", GPUVendor.NVIDIA),
  ("intel + nvidia (hybrid)", GPUVendor.HYBRID),
  ("nouveau (open)", GPUVendor.NOUVEAU),
  ("skip", GPUVendor.SKIP),
]

MICROCODE_CHOICES = [
  ("intel-ucode", CPUVendor.INTEL),
  ("amd-ucode", CPUVendor.AMD),
  ("skip", CPUVendor.UNKNOWN),
]


def kernel_combinations() -> list[tuple[Kernel, ...]]:
  """Every non-empty kernel selection, smallest first: linux, linux-lts, ..., all three."""
  kernels = list(Kernel)
  return [combo for size in range(1, len(kernels) + 1) for combo in combinations(kernels, size)]


def _ask_root_password() -> str | None:
  console.print()
  if not confirm("Set a root password?", default=False):
    return None
  return PasswordPrompt.ask("Root password (hidden)")


def _ask_gpu(warnings: list[str]) -> GPUVendor:
  detected = detect_gpu_vendor(warnings)
  options = [f"auto ({detected.value})", *(label for label, _ in GPU_CHOICES)]
  index = pick_one("Choose GPU driver", options)
  return detected if index == 0 else GPU_CHOICES[index - 1][1]


def _ask_microcode() -> CPUVendor:
  detected = detect_cpu_vendor()
  options = [f"auto ({detected.value})", *(label for label, _ in MICROCODE_CHOICES)]
  index = pick_one("Install CPU microcode?", options)
  return detected if index == 0 else MICROCODE_CHOICES[index - 1][1]


def _print_summary(record: InstallConfig, plan: PackagePlan) -> None:
  config_items = [
    ("Hostname", record.hostname),
    ("User", record.username),
    ("Root password", "set" if record.root_password is not None else "not set"),
    ("Timezone", record.timezone),
    ("Locales", ", ".join(str(entry) for entry in record.locales)),
    ("LANG", record.language),
    ("Keymap", record.keymap),
    ("Kernels", " + ".join(kernel.value for kernel in record.kernels)),
    ("Desktop", record.desktop.value),
    ("GPU", record.gpu.value),
    ("Microcode", plan.microcode),
    ("Swapfile", f"{record.swap_gb}G" if record.swap_gb else "no"),
    ("Steam", "yes" if record.gaming else "no"),
    ("EFI directory", record.esp),
  ]

  console.print()
  for label, value in config_items:
    console.print(f" • {label}: {value}")
  console.print(f"\n{len(plan.packages)} packages: {' '.join(plan.packages)}")


def step_0_settings(ctx: InstallerContext, warnings: list[str]) -> None:
  assert ctx.ui is not None
  assert ctx.esp is not None
  ctx.ui.initialize()

  defaults = load_defaults()
  presets = load_locale_presets()

  console.print("\n[bold]User choices[/]")
  hostname = ctx.config.hostname or HostnamePrompt.ask("Hostname")
  console.print()
  username = UsernamePrompt.ask("Username")
  user_password = PasswordPrompt.ask("User password (hidden)")
  root_password = _ask_root_password()

  console.print()
  timezone = TimezonePrompt.ask("Timezone (e.g. Europe/Moscow)", default=ctx.config.timezone)

  names = [preset["name"] for preset in presets]
  default_preset = names.index(defaults["preset"]) + 1 if defaults["preset"] in names else 1
  preset = presets[pick_one("Choose locale preset", names, default=default_preset)]

  console.print()
  locales = LocalesPrompt.ask("Locales to enable (comma-separated)", default=",".join(preset["locales"]))
  language = LanguagePrompt.ask("Default LANG", default=preset["language"])
  keymap = KeymapPrompt.ask("Console KEYMAP", default=ctx.config.keymap or preset["keymap"])

  combos = kernel_combinations()
  kernels = combos[pick_one("Choose kernel(s)", [" + ".join(k.value for k in combo) for combo in combos])]
  desktops = list(Desktop)
  desktop = desktops[pick_one("Choose Desktop Environment", [d.value for d in desktops])]

  gpu = _ask_gpu(warnings)
  cpu = _ask_microcode()

  swap_labels = ["no", *(f"yes ({size}G)" for size in SWAP_SIZES[1:])]
  swap_gb = SWAP_SIZES[pick_one("Create swapfile?", swap_labels)]
  console.print()
  gaming = confirm("Install Steam?", default=False)

  ctx.record = InstallConfig(
    hostname=hostname,
    username=username,
    user_password=user_password,
    root_password=root_password,
    timezone=timezone,
    locales=locales,
    language=language,
    keymap=keymap,
    kernels=kernels,
    desktop=desktop,
    gpu=gpu,
    cpu=cpu,
    esp=ctx.esp,
    swap_gb=swap_gb,
    gaming=gaming,
  )
  ctx.plan = resolve(ctx.record)
  _print_summary(ctx.record, ctx.plan)

  console.print(f"\n[bold yellow]WARNING:[/] The system in {ctx.target} will be installed and configured.", style="bold")
  if not confirm("Are you sure you want to continue?", default=False):
    console.print("\n[bold red]Installation aborted. No changes were made to the system.[/]")
    sys.exit(0)

  console.print()


def step_1_bulk_install(ctx: InstallerContext, _warnings: list[str]) -> None:
  assert ctx.ui is not None
  assert ctx.plan is not None
  cmd(f"pacstrap {ctx.target} {' '.join(ctx.plan.packages)}", ctx.dry, ctx.ui)


def step_2_generate_fstab(ctx: InstallerContext, _warnings: list[str]) -> None:
  assert ctx.ui is not None
  cmd(f"genfstab -U {ctx.target} >> {ctx.target}/etc/fstab", ctx.dry, ctx.ui)


def step_3_enable_multilib(ctx: InstallerContext, _warnings: list[str]) -> None:
  """Steam is installed from inside the target, so [multilib] must be on first."""
  assert ctx.ui is not None
  path = f"{ctx.target}/etc/pacman.conf"
  previous = read(path)
  if previous is None:
    ctx.ui.print(f"{path} not found - multilib left unchanged")
    return

  text = enable_multilib(previous)
  if text == previous:
    ctx.ui.print("multilib already enabled")
    return

  replace(text, path, ctx.dry, ctx.ui, previous)


def get_install_steps(ctx: InstallerContext) -> list[Callable[[InstallerContext, list[str]], None]]:
  """Host-side steps, run before the handoff to the target."""
  assert ctx.plan is not None
  steps = [step_1_bulk_install, step_2_generate_fstab]

  if ctx.plan.needs_multilib:
    steps.append(step_3_enable_multilib)

  return steps
