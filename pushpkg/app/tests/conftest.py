from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from pushpkg.app.settings import get_settings
from pushpkg.website import REQUIRED_ICONSET_FILES

WEBSITE = {
  "websiteName": "Bay Airlines",
  "websitePushID": "web.com.example.domain",
  "allowedDomains": "https://example.com",
  "urlFormatString": "https://example.com/%@/?flight=%@",
  "authenticationToken": "19f8d7a6e9fb8a7f6d9330dabe",
  "webServiceURL": "https://example.com/push",
}
PASSWORD = "correct horse"


@dataclass
class Credentials:
  pkcs12_path: Path
  intermediate_path: Path
  password: str
  signer_cert: x509.Certificate
  intermediate_cert: x509.Certificate


@dataclass
class Inputs:
  website_path: Path
  icon_dir: Path


def _certificate(subject: str, issuer: str, public_key, issuer_key, ca: bool) -> x509.Certificate:
  now = datetime.now(timezone.utc)
  return (
    x509.CertificateBuilder()
    .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject)]))
    .issuer_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, issuer)]))
    .public_key(public_key)
    .serial_number(x509.random_serial_number())
    .not_valid_before(now - timedelta(days=1))
    .not_valid_after(now + timedelta(days=30))
    .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
    .sign(issuer_key, hashes.SHA256())
  )


@pytest.fixture(scope="session")
def credentials(tmp_path_factory) -> Credentials:
  root = tmp_path_factory.mktemp("credentials")
  ca_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
  ca_cert = _certificate("Test WWDR Intermediate", "Test WWDR Intermediate", ca_key.public_key(), ca_key, ca=True)
  leaf_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
  leaf_cert = _certificate("Website Push ID: web.com.example.domain", "Test WWDR Intermediate", leaf_key.public_key(), ca_key, ca=False)

  pkcs12_path = root / "cert.p12"
  pkcs12_path.write_bytes(
    pkcs12.serialize_key_and_certificates(
      b"push",
      leaf_key,
      leaf_cert,
      None,
      serialization.BestAvailableEncryption(PASSWORD.encode("utf-8")),
    )
  )
  intermediate_path = root / "AppleWWDRCA.pem"
  intermediate_path.write_bytes(ca_cert.public_bytes(serialization.Encoding.PEM))
  return Credentials(pkcs12_path, intermediate_path, PASSWORD, leaf_cert, ca_cert)


@pytest.fixture
def inputs(tmp_path) -> Inputs:
  website_path = tmp_path / "website.json"
  website_path.write_text(json.dumps(WEBSITE, indent=2), encoding="utf-8")
  icon_dir = tmp_path / "icon.iconset"
  icon_dir.mkdir()
  for index, name in enumerate(REQUIRED_ICONSET_FILES):
    (icon_dir / name).write_bytes(b"\x89PNG\r\n\x1a\n" + bytes([index]) * (16 + index))
  return Inputs(website_path, icon_dir)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
  for name in ("PUSHPKG_WORK_DIR", "PUSHPKG_SIGNER", "PUSHPKG_STRICT", "PUSHPKG_OPENSSL", "PUSHPKG_OPENSSL_LEGACY"):
    monkeypatch.delenv(name, raising=False)
  get_settings.cache_clear()
  yield
  get_settings.cache_clear()
