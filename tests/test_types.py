import pytest

from easyinstall.types import Kernel


def test_to_env_carries_every_setting(make_config):
  env = make_config(root_password="toor", kernels=(Kernel.LINUX, Kernel.ZEN), swap_gb=4).to_env()

  assert env["EASYINSTALL_HOSTNAME"] == "archbox"
  assert env["EASYINSTALL_USER_PASSWORD"] == "secret"
  assert env["EASYINSTALL_ROOT_PASSWORD"] == "toor"
  assert env["EASYINSTALL_KERNELS"] == "linux linux-zen"
  assert env["EASYINSTALL_LOCALES"] == "en_US.UTF-8 UTF-8"
  assert env["EASYINSTALL_SWAP_GB"] == "4"
  assert env["EASYINSTALL_ESP"] == "/boot/efi"
  assert all(isinstance(value, str) for value in env.values())


def test_to_env_without_root_password(make_config):
  assert "EASYINSTALL_ROOT_PASSWORD" not in make_config().to_env()


@pytest.mark.parametrize(
  "overrides",
  [
    {"hostname": ""},
    {"user_password": ""},
    {"root_password": ""},
    {"locales": ()},
    {"kernels": ()},
    {"kernels": (Kernel.LINUX, Kernel.LINUX)},
    {"swap_gb": 3},
    {"esp": "/boot"},
  ],
)
def test_invalid_records_are_rejected(make_config, overrides):
  with pytest.raises(ValueError):
    make_config(**overrides)


def test_record_is_frozen(make_config):
  config = make_config()
  with pytest.raises(AttributeError):
    config.hostname = "other"  # type: ignore[misc]
