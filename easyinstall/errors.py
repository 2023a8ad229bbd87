"""Exceptions raised by the installer."""

from enum import Enum


class InstallerError(Exception):
  """Base class for all installer errors."""


class PreconditionKind(Enum):
  INSUFFICIENT_PRIVILEGE = "InsufficientPrivilege"
  TARGET_NOT_MOUNTED = "TargetNotMounted"
  UNSUPPORTED_BOOT_MODE = "UnsupportedBootMode"
  BOOT_PARTITION_NOT_MOUNTED = "BootPartitionNotMounted"


class PreconditionError(InstallerError):
  """The environment is not ready; raised before anything is changed."""

  def __init__(self, kind: PreconditionKind, message: str, hint: str = "") -> None:
    super().__init__(message)
    self.kind: PreconditionKind = kind
    self.hint: str = hint


class ValidationError(InstallerError, ValueError):
  """User input was rejected; prompts catch this and ask again."""


class PhaseError(InstallerError):
  """An installation phase failed. The run stops here and nothing is rolled back."""

  def __init__(self, phase: str, cause: BaseException) -> None:
    super().__init__(f"{phase}: {cause}")
    self.phase: str = phase
    self.cause: BaseException = cause


class BestEffortError(InstallerError):
  """An optional step failed. Reported as a warning, never fatal."""
