"""Hashes the icon set and website.json into manifest.json."""
from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence

from pushpkg.app.models import ManifestEntryModel
from pushpkg.website import REQUIRED_ICONSET_FILES

MANIFEST_NAME = "manifest.json"
ICONSET_ARCHIVE_DIR = "icon.iconset"
WEBSITE_ARCHIVE_NAME = "website.json"


class ManifestError(RuntimeError):
  pass


@dataclass(frozen=True)
class ManifestFile:
  path: Path
  name: str


def hash_file(path: Path) -> str:
  try:
    body = Path(path).read_bytes()
  except OSError as exc:
    raise ManifestError(f"Cannot read {path}: {exc.strerror or exc}") from exc
  return hashlib.sha512(body).hexdigest()


def get_file_list(website_path: Path, icon_dir: Path) -> List[ManifestFile]:
  files = [
    ManifestFile(path=Path(icon_dir) / name, name=f"{ICONSET_ARCHIVE_DIR}/{name}")
    for name in REQUIRED_ICONSET_FILES
  ]
  files.append(ManifestFile(path=Path(website_path), name=WEBSITE_ARCHIVE_NAME))
  return files


def build_manifest(files: Sequence[ManifestFile], work_dir: Path) -> bytes:
  """Writes manifest.json into work_dir and returns its bytes.

  Every file is hashed before anything is written, so an unreadable input
  leaves any previous manifest.json untouched.
  """
  manifest: Dict[str, Dict[str, str]] = {}
  for item in files:
    entry = ManifestEntryModel(hashValue=hash_file(item.path))
    manifest[item.name] = entry.model_dump()

  body = json.dumps(manifest, separators=(",", ":")).encode("utf-8")
  manifest_path = Path(work_dir) / MANIFEST_NAME
  try:
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    manifest_path.write_bytes(body)
  except OSError as exc:
    raise ManifestError(f"Cannot write {manifest_path}: {exc.strerror or exc}") from exc
  print(f"Wrote manifest with {len(manifest)} entries -> {manifest_path}")
  return body
