from __future__ import annotations

import getpass
from pathlib import Path
from typing import Callable, Optional

from pushpkg.sign_manifest import CryptographySigner, OpenSSLSigner, Signer

from .settings import Settings


class PasswordProvider:
  def get_password(self) -> str:
    raise NotImplementedError


class StaticPasswordProvider(PasswordProvider):
  def __init__(self, password: str = "") -> None:
    self._password = password

  def get_password(self) -> str:
    return self._password


class PromptPasswordProvider(PasswordProvider):
  """Asks for the certificate password once, on first use."""

  def __init__(self, prompt: str = "Input certificate password: ", reader: Optional[Callable[[str], str]] = None) -> None:
    self._prompt = prompt
    self._reader = reader or getpass.getpass
    self._password: Optional[str] = None

  def get_password(self) -> str:
    if self._password is None:
      self._password = self._reader(self._prompt)
    return self._password


def get_password_provider(prompt: bool) -> PasswordProvider:
  return PromptPasswordProvider() if prompt else StaticPasswordProvider()


def get_signer(
  settings: Settings,
  pkcs12_path: Path,
  intermediate_path: Path,
  password_provider: PasswordProvider,
  signer: Optional[str] = None,
) -> Signer:
  name = signer or settings.signer
  password = password_provider.get_password()
  if name == "cryptography":
    return CryptographySigner(pkcs12_path, password, intermediate_path)
  if name == "openssl":
    return OpenSSLSigner(
      pkcs12_path,
      password,
      intermediate_path,
      openssl=settings.openssl_bin,
      legacy=settings.openssl_legacy,
    )
  raise ValueError(f"Unknown signer {name}")
