from collections.abc import Iterable

import pytest
from rich.prompt import Prompt

from easyinstall import input as prompts
from easyinstall.input import LocalesPrompt, PasswordPrompt, TimezonePrompt
from easyinstall.types import LocaleEntry


def answer(monkeypatch: pytest.MonkeyPatch, replies: Iterable[str]) -> list[str]:
  """Feed Prompt.ask from a list and record each question asked."""
  pending = iter(replies)
  asked: list[str] = []

  def fake_ask(message: str, *_args, **_kwargs) -> str:
    asked.append(message)
    return next(pending)

  monkeypatch.setattr(Prompt, "ask", fake_ask)
  return asked


def test_timezone_prompt_repeats_until_valid(monkeypatch):
  asked = answer(monkeypatch, ["Mars/Olympus", "", "Europe/Moscow"])
  timezone = TimezonePrompt.ask("Timezone", timezones={"Europe/Moscow", "UTC"})
  assert timezone == "Europe/Moscow"
  assert len(asked) == 3


def test_password_prompt_requires_matching_entries(monkeypatch):
  asked = answer(monkeypatch, ["", "one", "two", "hunter2", "hunter2"])
  assert PasswordPrompt.ask("Password") == "hunter2"
  assert asked == ["Password", "Password", "Verify the password", "Password", "Verify the password"]


def test_locales_prompt_reasks_on_bad_entry(monkeypatch):
  answer(monkeypatch, ["en_US.UTF-8", "en_US.UTF-8 UTF-8"])
  assert LocalesPrompt.ask("Locales", default="en_US.UTF-8 UTF-8") == (LocaleEntry("en_US.UTF-8", "UTF-8"),)


def test_pick_one_returns_zero_based_index(monkeypatch):
  monkeypatch.setattr(prompts.IntegerPrompt, "ask", classmethod(lambda cls, *a, **k: 3))
  assert prompts.pick_one("Choose", ["a", "b", "c"]) == 2
