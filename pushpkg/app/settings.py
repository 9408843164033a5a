from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

SIGNERS = ("openssl", "cryptography")


def _to_bool(value: str) -> bool:
  return value.strip().lower() in {"1", "true", "yes"}


@dataclass
class Settings:
  work_dir: Path
  signer: str = "openssl"
  strict: bool = False
  openssl_bin: str = "openssl"
  openssl_legacy: bool = False

  @classmethod
  def from_env(cls) -> "Settings":
    work_dir = os.getenv("PUSHPKG_WORK_DIR")
    signer = os.getenv("PUSHPKG_SIGNER", "openssl").strip().lower()
    if signer not in SIGNERS:
      raise ValueError(f"PUSHPKG_SIGNER must be one of {', '.join(SIGNERS)}, got {signer!r}")
    return cls(
      work_dir=Path(work_dir).expanduser() if work_dir else Path.cwd(),
      signer=signer,
      strict=_to_bool(os.getenv("PUSHPKG_STRICT", "")),
      openssl_bin=os.getenv("PUSHPKG_OPENSSL") or "openssl",
      openssl_legacy=_to_bool(os.getenv("PUSHPKG_OPENSSL_LEGACY", "")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  return Settings.from_env()
