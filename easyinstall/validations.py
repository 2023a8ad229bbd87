"""
Validation functions for easyinstall.

This module contains all validation functions used throughout the application
for validating usernames, hostnames, timezones, locales, keymaps and JSON data.
"""

import os
import re
from collections.abc import Collection
from functools import cache
from typing import Any
from zoneinfo import available_timezones

from easyinstall.errors import ValidationError
from easyinstall.types import LocaleEntry, LocalePreset

# =============================================================================
# Validation Functions
# =============================================================================
# Functions that validate data and return boolean or list of issues


def validate_username(username: str) -> bool:
  max_len = 32

  if not username:
    return False
  if username[0] == "-":
    return False
  if len(username) > max_len:
    return False
  if username.isdigit():
    return False

  pattern = re.compile(rf"^[a-z_][a-z0-9_-]{{0,{max_len - 1}}}$")
  return bool(pattern.fullmatch(username))


def validate_password(password: str) -> bool:
  return bool(password)


@cache
def load_timezones() -> frozenset[str]:
  """Timezone names known to the host's zoneinfo database."""
  return frozenset(available_timezones())


def validate_timezone(timezone: str, timezones: Collection[str] | None = None) -> bool:
  """Validate timezone by membership in the host timezone database."""
  if not timezone:
    return False

  known = load_timezones() if timezones is None else timezones
  return timezone in known


def validate_locale(locale: str) -> bool:
  """Validate locale format - supports various glibc locale formats."""
  if not locale:
    return False

  # Allow C/POSIX locales
  if locale in ("C", "POSIX", "C.UTF-8"):
    return True

  # Basic pattern: language[_territory][.encoding][@modifier]
  # Examples: en, en_US, en_US.UTF-8, en_US@euro, de_DE.ISO-8859-1@euro
  pattern = r"^[a-z]{2,3}(_[A-Z]{2})?(\.[A-Za-z0-9_-]+)?(@[A-Za-z0-9_-]+)?$"
  return bool(re.match(pattern, locale))


def validate_keymap(keymap: str) -> bool:
  """Console keymaps are single tokens such as 'us', 'de-latin1' or 'ru'."""
  return bool(re.fullmatch(r"[A-Za-z0-9_.-]+", keymap))


def validate_hostname(hostname: str) -> bool:
  """Validate hostname format according to RFC 1123."""
  if not hostname or len(hostname) > 253:
    return False

  labels = hostname.split(".")

  def is_valid_label(label: str) -> bool:
    return (
      bool(label)
      and len(label) <= 63
      and label[0].isalnum()
      and label[-1].isalnum()
      and all(c.isalnum() or c == "-" for c in label)
    )

  return all(is_valid_label(label) for label in labels)


def parse_locales(raw: str) -> tuple[LocaleEntry, ...]:
  """
  Parse a comma separated list of locale.gen entries.

  "en_US.UTF-8 UTF-8, ru_RU.UTF-8 UTF-8" -> two LocaleEntry values.
  Blank items are ignored and repeated entries keep their first position.

  Raises:
      ValidationError: if an item is not "<locale> <charset>" or nothing is left
  """
  entries: list[LocaleEntry] = []

  for item in (part.strip() for part in raw.split(",")):
    if not item:
      continue

    fields = item.split()
    if len(fields) != 2 or not validate_locale(fields[0]):
      raise ValidationError(f"Invalid locale entry: '{item}' (expected e.g. 'en_US.UTF-8 UTF-8')")

    entry = LocaleEntry(*fields)
    if entry not in entries:
      entries.append(entry)

  if not entries:
    raise ValidationError("At least one locale is required")

  return tuple(entries)


def validate_defaults_json(data: Any) -> dict[str, Any]:
  """Validate and return defaults JSON data with proper typing."""
  if not isinstance(data, dict):
    raise ValueError("Defaults JSON must be an object")

  required_keys = {"target", "transcript", "timezone", "keymap", "preset"}
  missing_keys = required_keys - data.keys()
  if missing_keys:
    raise KeyError(f"Missing required keys: {missing_keys}")

  if not all(isinstance(data[key], str) for key in required_keys):
    raise ValueError("Default values must be strings")

  return data


def validate_presets_json(data: Any) -> list[LocalePreset]:
  """Validate and return locale preset JSON data with proper typing."""
  if not isinstance(data, list) or not data:
    raise ValueError("Locale presets JSON must be a non-empty array")

  for item in data:
    if not isinstance(item, dict):
      raise ValueError("Each locale preset must be an object")

    if not all(key in item for key in ["name", "locales", "language", "keymap"]):
      raise ValueError("Each locale preset must have name, locales, language, and keymap fields")

    if not isinstance(item["locales"], list) or not item["locales"]:
      raise ValueError(f"Locale preset '{item['name']}' must list at least one locale")

  return data


def validate_cli_arguments(
  target: str,
  timezone: str,
  keymap: str | None = None,
  hostname: str | None = None,
  timezones: Collection[str] | None = None,
) -> list[str]:
  """
  Validate all command line arguments and return list of error messages.

  Returns empty list if all arguments are valid, list of error messages otherwise.
  """
  # Define validators as (condition, error_message) tuples
  validators = [
    (os.path.isabs(target), f"Invalid target: {target} (must be an absolute path)"),
    (validate_timezone(timezone, timezones), f"Invalid timezone: {timezone} (not in the timezone database)"),
  ]

  if keymap:
    validators.append((validate_keymap(keymap), f"Invalid keymap: {keymap}"))

  if hostname:
    validators.append((validate_hostname(hostname), f"Invalid hostname: {hostname} (must follow RFC 1123 format)"))

  return [msg for valid, msg in validators if not valid]
