"""
The installation pipeline.

Host-side steps run first, then the settings are handed to the target
context and the target-side steps run in order. Steps are never retried and
never rolled back: the first failure stops the run with a PhaseError naming
the step and carrying the underlying exception.
"""

from collections.abc import Callable

from easyinstall.chroot import TargetContext, get_target_steps, handoff
from easyinstall.context import InstallerContext
from easyinstall.errors import PhaseError
from easyinstall.steps import get_install_steps
from easyinstall.utils import format_step_name


def run_installation(ctx: InstallerContext, warnings: list[str]) -> list[str]:
  """
  Run every step for the confirmed settings in ctx.

  Returns:
      Names of the steps that ran, in order

  Raises:
      PhaseError: on the first failing step
  """
  assert ctx.ui is not None
  assert ctx.record is not None
  assert ctx.plan is not None
  ui = ctx.ui

  host_steps = get_install_steps(ctx)
  target_steps = get_target_steps(ctx.record, ctx.plan)
  total_steps = len(host_steps) + 1 + len(target_steps)
  completed: list[str] = []

  def run_step(name: str, action: Callable[[], None]) -> None:
    i = len(completed) + 1
    filled = "▓" * i
    empty = "░" * (total_steps - i)
    ui.update_status(f"[{filled}{empty}] {name} · Step {i}/{total_steps}", name)

    try:
      action()

    except Exception as e:
      raise PhaseError(name, e) from e

    completed.append(name)

  for step in host_steps:
    run_step(format_step_name(step.__name__), lambda step=step: step(ctx, warnings))

  target: TargetContext | None = None

  def enter_target() -> None:
    nonlocal target
    target = handoff(ctx, warnings)

  run_step("Handoff", enter_target)
  assert target is not None

  for target_step in target_steps:
    run_step(format_step_name(target_step.__name__), lambda target_step=target_step: target_step(target))

  return completed
