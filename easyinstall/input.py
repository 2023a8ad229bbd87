from collections.abc import Collection

from rich.prompt import Confirm, Prompt, PromptBase

from easyinstall.errors import ValidationError
from easyinstall.transcript import console
from easyinstall.types import LocaleEntry
from easyinstall.validations import (
  parse_locales,
  validate_hostname,
  validate_keymap,
  validate_locale,
  validate_password,
  validate_timezone,
  validate_username,
)


class HostnamePrompt:
  @classmethod
  def ask(cls, message: str, default: str | None = None) -> str:
    while True:
      host = Prompt.ask(message, default=default, show_default=bool(default), console=console)
      if not validate_hostname(host):
        console.print("\n[prompt.invalid]Invalid hostname - must follow RFC 1123 (letters, digits, hyphens).[/]")
        continue
      return host


class IntegerPrompt(PromptBase[int]):
  response_type = int
  validate_error_message = "\n[prompt.invalid]Please enter a valid integer number"
  illegal_choice_message = "\n[prompt.invalid.choice]Please select one of the available options"


class UsernamePrompt:
  @classmethod
  def ask(cls, message: str) -> str:
    while True:
      user_name = Prompt.ask(message, console=console)
      if not validate_username(user_name):
        console.print("\n[prompt.invalid]Invalid username - use lowercase letters, digits, hyphen or underscore.[/]")
        continue
      return user_name


class PasswordPrompt:
  @classmethod
  def ask(cls, message: str) -> str:
    while True:
      password = Prompt.ask(message, password=True, console=console)
      if not validate_password(password):
        console.print("\n[prompt.invalid]Password cannot be empty.[/]")
        continue

      password_check = Prompt.ask("Verify the password", password=True, console=console)
      if password != password_check:
        console.print("\n[prompt.invalid]Passwords don't match, please try again.[/]")
        continue

      return password


class TimezonePrompt:
  @classmethod
  def ask(cls, message: str, default: str | None = None, timezones: Collection[str] | None = None) -> str:
    while True:
      timezone = Prompt.ask(message, default=default, show_default=bool(default), console=console).strip()
      if not validate_timezone(timezone, timezones):
        console.print("\n[prompt.invalid]Invalid timezone. Example: Europe/Moscow, Europe/Amsterdam[/]")
        continue
      return timezone


class LocalesPrompt:
  @classmethod
  def ask(cls, message: str, default: str) -> tuple[LocaleEntry, ...]:
    while True:
      raw = Prompt.ask(message, default=default, console=console)
      try:
        return parse_locales(raw)

      except ValidationError as e:
        console.print(f"\n[prompt.invalid]{e}[/]")


class LanguagePrompt:
  @classmethod
  def ask(cls, message: str, default: str) -> str:
    while True:
      language = Prompt.ask(message, default=default, console=console).strip()
      if not validate_locale(language):
        console.print("\n[prompt.invalid]Invalid locale - expected language[_COUNTRY][.encoding][@modifier].[/]")
        continue
      return language


class KeymapPrompt:
  @classmethod
  def ask(cls, message: str, default: str) -> str:
    while True:
      keymap = Prompt.ask(message, default=default, console=console).strip()
      if not validate_keymap(keymap):
        console.print("\n[prompt.invalid]Invalid keymap.[/]")
        continue
      return keymap


def pick_one(title: str, options: list[str], default: int = 1) -> int:
  """Show a numbered list and return the zero-based index of the chosen option."""
  console.print()
  console.print(title)
  for i, option in enumerate(options, start=1):
    console.print(f" {i}. {option}")

  console.print()
  choices = [str(i) for i in range(1, len(options) + 1)]
  choice = IntegerPrompt.ask("Choose an option (enter number)", choices=choices, default=default, console=console)
  return choice - 1


def confirm(message: str, default: bool = False) -> bool:
  return Confirm.ask(message, default=default, console=console)
