"""Produces the detached PKCS#7 signature over manifest.json."""
from __future__ import annotations

import os
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.serialization import pkcs7, pkcs12

SIGNATURE_NAME = "signature"
PASSWORD_ENV = "PUSHPKG_PKCS12_PASSWORD"


class SigningError(RuntimeError):
  pass


class Signer:
  """Turns manifest bytes into a DER encoded detached signature."""

  def sign(self, manifest: bytes) -> bytes:
    raise NotImplementedError


class OpenSSLSigner(Signer):
  """Signs by shelling out to the openssl command line tool.

  The certificate and the unencrypted key are extracted from the PKCS#12
  container into a temporary directory which is removed once signing
  finishes, whether it succeeded or not.
  """

  def __init__(
    self,
    pkcs12_path: Path,
    password: str,
    intermediate_path: Path,
    openssl: str = "openssl",
    temp_dir: Optional[Path] = None,
    legacy: bool = False,
  ) -> None:
    self._pkcs12_path = Path(pkcs12_path)
    self._password = password or ""
    self._intermediate_path = Path(intermediate_path)
    self._openssl = openssl
    self._temp_dir = temp_dir
    # OpenSSL 3 needs -legacy for RC2/3DES containers exported by older keychains
    self._pkcs12_flags = ["-legacy"] if legacy else []

  def _run(self, args: Sequence[str]) -> None:
    command = [self._openssl, *args]
    env = dict(os.environ)
    env[PASSWORD_ENV] = self._password
    try:
      result = subprocess.run(command, capture_output=True, text=True, env=env)
    except OSError as exc:
      raise SigningError(f"Cannot run {self._openssl}: {exc}") from exc
    if result.returncode != 0:
      detail = result.stderr.strip() or f"exit status {result.returncode}"
      raise SigningError(f"{self._openssl} {args[0]} failed: {detail}")

  def sign(self, manifest: bytes) -> bytes:
    passin = f"env:{PASSWORD_ENV}"
    with tempfile.TemporaryDirectory(prefix="pushpkg_", dir=self._temp_dir) as tmp:
      tmp_dir = Path(tmp)
      cert_pem = tmp_dir / "sign.crt.pem"
      key_pem = tmp_dir / "sign.key.pem"
      manifest_path = tmp_dir / "manifest.json"
      signature_path = tmp_dir / SIGNATURE_NAME
      manifest_path.write_bytes(manifest)

      self._run(["pkcs12", *self._pkcs12_flags, "-in", str(self._pkcs12_path), "-out", str(cert_pem), "-clcerts", "-nokeys", "-passin", passin])
      self._run(["pkcs12", *self._pkcs12_flags, "-in", str(self._pkcs12_path), "-out", str(key_pem), "-nocerts", "-nodes", "-passin", passin])
      self._run(
        [
          "smime",
          "-sign",
          "-signer",
          str(cert_pem),
          "-inkey",
          str(key_pem),
          "-certfile",
          str(self._intermediate_path),
          "-binary",
          "-outform",
          "der",
          "-in",
          str(manifest_path),
          "-out",
          str(signature_path),
        ]
      )
      return signature_path.read_bytes()


def _load_certificates(path: Path) -> List[x509.Certificate]:
  data = path.read_bytes()
  if b"-----BEGIN CERTIFICATE-----" in data:
    return x509.load_pem_x509_certificates(data)
  return [x509.load_der_x509_certificate(data)]


class CryptographySigner(Signer):
  """Signs in-process with the cryptography library."""

  def __init__(self, pkcs12_path: Path, password: str, intermediate_path: Path) -> None:
    self._pkcs12_path = Path(pkcs12_path)
    self._password = password or ""
    self._intermediate_path = Path(intermediate_path)

  def sign(self, manifest: bytes) -> bytes:
    try:
      container = self._pkcs12_path.read_bytes()
      intermediates = _load_certificates(self._intermediate_path)
    except OSError as exc:
      raise SigningError(f"Cannot read signing material: {exc}") from exc
    except ValueError as exc:
      raise SigningError(f"Invalid intermediate certificate {self._intermediate_path}: {exc}") from exc

    password = self._password.encode("utf-8") if self._password else None
    try:
      key, cert, _ = pkcs12.load_key_and_certificates(container, password)
    except ValueError as exc:
      raise SigningError(f"Cannot open {self._pkcs12_path}: {exc}") from exc
    if key is None or cert is None:
      raise SigningError(f"{self._pkcs12_path} must contain a private key and a certificate")

    builder = pkcs7.PKCS7SignatureBuilder().set_data(manifest)
    try:
      builder = builder.add_signer(cert, key, hashes.SHA256())
      for intermediate in intermediates:
        builder = builder.add_certificate(intermediate)
      return builder.sign(
        serialization.Encoding.DER,
        [pkcs7.PKCS7Options.DetachedSignature, pkcs7.PKCS7Options.Binary],
      )
    except (TypeError, ValueError) as exc:
      raise SigningError(f"Cannot sign manifest: {exc}") from exc


def write_signature(signature: bytes, work_dir: Path) -> Path:
  signature_path = Path(work_dir) / SIGNATURE_NAME
  try:
    signature_path.write_bytes(signature)
  except OSError as exc:
    raise SigningError(f"Cannot write {signature_path}: {exc.strerror or exc}") from exc
  print(f"Signed manifest -> {signature_path}")
  return signature_path
