"""
Contents of, and patches to, configuration files in the target root.

The patchers are pure functions over file text. Each one only touches the
lines it recognises, so applying it a second time returns the text unchanged.
"""

from easyinstall.types import LocaleEntry

MULTILIB_HEADER = "#[multilib]"
MULTILIB_INCLUDE = "#Include = /etc/pacman.d/mirrorlist"

SUDOERS_DROPIN = "/etc/sudoers.d/10-wheel"
SWAPFILE = "/swapfile"
NVIDIA_MODPROBE = "/etc/modprobe.d/nvidia.conf"
USER_GROUPS = ["wheel", "audio", "video", "optical", "storage"]


def enable_multilib(text: str) -> str:
  """
  Uncomment the [multilib] block of pacman.conf.

  Every line from "#[multilib]" through the next commented mirrorlist Include
  loses one leading '#'. Text without a commented [multilib] header is
  returned as is.
  """
  lines = text.splitlines(keepends=True)
  start = next((i for i, line in enumerate(lines) if line.rstrip() == MULTILIB_HEADER), None)
  if start is None:
    return text

  for i in range(start, len(lines)):
    is_last = lines[i].rstrip() == MULTILIB_INCLUDE
    if lines[i].startswith("#"):
      lines[i] = lines[i][1:]
    if is_last:
      break

  return "".join(lines)


def enable_locales(text: str, entries: tuple[LocaleEntry, ...]) -> tuple[str, list[LocaleEntry]]:
  """
  Uncomment the locale.gen lines that exactly match the requested entries.

  Returns the patched text and the entries that have no line at all, either
  commented or active. Those are left out of the generated locales.
  """
  wanted = {str(entry) for entry in entries}
  found: set[str] = set()
  lines = text.splitlines(keepends=True)

  for i, line in enumerate(lines):
    content = line.rstrip("\n")
    if content in wanted:
      found.add(content)
    elif content.startswith("#") and content[1:] in wanted:
      lines[i] = line[1:]
      found.add(content[1:])

  missing = [entry for entry in entries if str(entry) not in found]
  return "".join(lines), missing


def hosts_lines(hostname: str) -> list[str]:
  return [
    "127.0.0.1   localhost",
    "::1         localhost",
    f"127.0.1.1   {hostname}.localdomain {hostname}",
  ]


def locale_conf_lines(language: str) -> list[str]:
  return [f"LANG={language}"]


def vconsole_lines(keymap: str) -> list[str]:
  return [f"KEYMAP={keymap}"]


def sudoers_lines() -> list[str]:
  return ["%wheel ALL=(ALL:ALL) ALL"]


def swap_fstab_line() -> str:
  return f"{SWAPFILE} none swap defaults 0 0"


def nvidia_modprobe_lines() -> list[str]:
  return ["options nvidia_drm modeset=1"]
