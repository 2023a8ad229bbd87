import pytest

from easyinstall.errors import ValidationError
from easyinstall.types import LocaleEntry
from easyinstall.validations import (
  parse_locales,
  validate_cli_arguments,
  validate_hostname,
  validate_timezone,
  validate_username,
)

TIMEZONES = {"UTC", "Europe/Moscow", "Europe/Amsterdam", "America/Argentina/Buenos_Aires"}


def test_parse_locales():
  assert parse_locales("en_US.UTF-8 UTF-8, ru_RU.UTF-8 UTF-8,") == (
    LocaleEntry("en_US.UTF-8", "UTF-8"),
    LocaleEntry("ru_RU.UTF-8", "UTF-8"),
  )


def test_parse_locales_keeps_first_occurrence():
  assert parse_locales("de_DE.UTF-8 UTF-8,en_US.UTF-8 UTF-8,de_DE.UTF-8 UTF-8") == (
    LocaleEntry("de_DE.UTF-8", "UTF-8"),
    LocaleEntry("en_US.UTF-8", "UTF-8"),
  )


@pytest.mark.parametrize("raw", ["", " , ", "en_US.UTF-8", "en_US.UTF-8 UTF-8 extra", "english UTF-8"])
def test_parse_locales_rejects(raw):
  with pytest.raises(ValidationError):
    parse_locales(raw)


@pytest.mark.parametrize(
  "timezone, valid",
  [
    ("Europe/Moscow", True),
    ("America/Argentina/Buenos_Aires", True),
    ("UTC", True),
    ("Europe/Atlantis", False),
    ("europe/moscow", False),
    ("", False),
  ],
)
def test_validate_timezone_is_a_membership_test(timezone, valid):
  assert validate_timezone(timezone, TIMEZONES) is valid


@pytest.mark.parametrize("name, valid", [("alice", True), ("_svc", True), ("Alice", False), ("-x", False), ("123", False)])
def test_validate_username(name, valid):
  assert validate_username(name) is valid


@pytest.mark.parametrize("name, valid", [("archbox", True), ("my-host.lan", True), ("-bad", False), ("", False)])
def test_validate_hostname(name, valid):
  assert validate_hostname(name) is valid


def test_validate_cli_arguments():
  assert validate_cli_arguments("/mnt", "UTC", "us", "archbox", timezones=TIMEZONES) == []

  errors = validate_cli_arguments("mnt", "Mars/Olympus", "us;rm", "-bad", timezones=TIMEZONES)
  assert len(errors) == 4
  assert errors[0].startswith("Invalid target")
