from textwrap import dedent

from easyinstall.files import enable_locales, enable_multilib, hosts_lines
from easyinstall.types import LocaleEntry

PACMAN_CONF = dedent("""\
  [core]
  Include = /etc/pacman.d/mirrorlist

  #[multilib-testing]
  #Include = /etc/pacman.d/mirrorlist

  #[multilib]
  #Include = /etc/pacman.d/mirrorlist

  # An example of a custom package repository.
  #[custom]
  #Server = file:///home/custompkgs
""")

LOCALE_GEN = dedent("""\
  #  en_US ISO-8859-1
  #en_US.UTF-8 UTF-8
  #en_US ISO-8859-1
  #ru_RU.UTF-8 UTF-8
  #ru_RU.KOI8-R KOI8-R
""")

EN_US = LocaleEntry("en_US.UTF-8", "UTF-8")
RU_RU = LocaleEntry("ru_RU.UTF-8", "UTF-8")


def test_enable_multilib_uncomments_only_the_multilib_block():
  patched = enable_multilib(PACMAN_CONF)
  lines = patched.splitlines()

  assert "[multilib]" in lines
  assert lines[lines.index("[multilib]") + 1] == "Include = /etc/pacman.d/mirrorlist"
  assert "#[multilib-testing]" in lines
  assert "#[custom]" in lines
  assert patched.endswith("#Server = file:///home/custompkgs\n")


def test_enable_multilib_is_idempotent():
  once = enable_multilib(PACMAN_CONF)
  assert enable_multilib(once) == once


def test_enable_multilib_without_block_is_a_noop():
  text = "[core]\nInclude = /etc/pacman.d/mirrorlist\n"
  assert enable_multilib(text) == text


def test_enable_locales_uncomments_exact_matches():
  patched, missing = enable_locales(LOCALE_GEN, (EN_US, RU_RU))

  assert missing == []
  assert "en_US.UTF-8 UTF-8" in patched.splitlines()
  assert "ru_RU.UTF-8 UTF-8" in patched.splitlines()
  assert "#en_US ISO-8859-1" in patched.splitlines()
  assert "#  en_US ISO-8859-1" in patched.splitlines()


def test_enable_locales_reports_unknown_entries():
  unknown = LocaleEntry("xx_XX.UTF-8", "UTF-8")
  patched, missing = enable_locales(LOCALE_GEN, (unknown, EN_US))
  assert missing == [unknown]
  assert patched.count("\nen_US.UTF-8 UTF-8") == 1


def test_enable_locales_is_idempotent():
  once, _ = enable_locales(LOCALE_GEN, (EN_US,))
  twice, missing = enable_locales(once, (EN_US,))
  assert twice == once
  assert missing == []


def test_hosts_lines():
  assert hosts_lines("archbox")[-1] == "127.0.1.1   archbox.localdomain archbox"
