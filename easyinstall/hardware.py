"""Best-effort CPU and GPU vendor detection. Nothing here raises."""

import re
import subprocess

from easyinstall.types import CPUVendor, GPUVendor

GPU_LINE_MARKERS = ["vga compatible controller", "3d controller", "display controller"]

VENDOR_PATTERNS = [
  (re.compile(r"\bintel\b"), GPUVendor.INTEL),
  (re.compile(r"\b(amd|ati|radeon|advanced micro devices)\b"), GPUVendor.AMD),
  (re.compile(r"\b(nvidia|geforce|quadro|tesla)\b"), GPUVendor.NVIDIA),
]


def classify_gpu(lspci_output: str) -> GPUVendor:
  """
  Classify `lspci -nn` output.

  Intel and NVIDIA together is reported as the hybrid setup; otherwise
  NVIDIA wins over AMD, and AMD over Intel.
  """
  output = lspci_output.lower()

  # Filter for GPU-related lines
  gpu_lines = [line for line in output.splitlines() if any(x in line for x in GPU_LINE_MARKERS)]

  vendors = {vendor for line in gpu_lines for pattern, vendor in VENDOR_PATTERNS if pattern.search(line)}

  if {GPUVendor.INTEL, GPUVendor.NVIDIA} <= vendors:
    return GPUVendor.HYBRID

  for vendor in (GPUVendor.NVIDIA, GPUVendor.AMD, GPUVendor.INTEL):
    if vendor in vendors:
      return vendor

  return GPUVendor.UNKNOWN


def detect_gpu_vendor(warnings: list[str] | None = None) -> GPUVendor:
  """
  Detect the GPU vendor by examining lspci output.

  Args:
      warnings: Optional list to collect warnings when detection is not possible

  Returns:
      GPUVendor.UNKNOWN when lspci is missing, fails, or reports no known vendor
  """
  try:
    result = subprocess.run(["lspci", "-nn"], capture_output=True, text=True, check=False)

  except FileNotFoundError:
    if warnings is not None:
      warnings.append("Install pciutils to enable GPU detection")
    return GPUVendor.UNKNOWN

  if result.returncode != 0:
    if warnings is not None:
      warnings.append(f"lspci failed (exit {result.returncode}) - GPU detection skipped")
    return GPUVendor.UNKNOWN

  return classify_gpu(result.stdout)


def classify_cpu(cpuinfo: str) -> CPUVendor:
  for line in cpuinfo.splitlines():
    key, _, value = line.partition(":")
    if key.strip() == "vendor_id":
      match value.strip():
        case "GenuineIntel":
          return CPUVendor.INTEL
        case "AuthenticAMD":
          return CPUVendor.AMD

  # No vendor_id line (e.g. some virtualised or non-x86 kernels)
  text = cpuinfo.lower()
  if "intel" in text:
    return CPUVendor.INTEL
  if "amd" in text:
    return CPUVendor.AMD

  return CPUVendor.UNKNOWN


def detect_cpu_vendor(cpuinfo_path: str = "/proc/cpuinfo") -> CPUVendor:
  try:
    with open(cpuinfo_path, "r") as f:
      return classify_cpu(f.read())

  except OSError:
    return CPUVendor.UNKNOWN
