"""Zips the icon set, website.json, manifest and signature into pushPackage.zip."""
from __future__ import annotations

import io
import zipfile
from pathlib import Path

from pushpkg.build_manifest import ICONSET_ARCHIVE_DIR, MANIFEST_NAME, WEBSITE_ARCHIVE_NAME
from pushpkg.sign_manifest import SIGNATURE_NAME

PACKAGE_NAME = "pushPackage.zip"


class PackagingError(RuntimeError):
  pass


def assemble_package(icon_dir: Path, website_path: Path, work_dir: Path, output_dir: Path) -> Path:
  icon_dir = Path(icon_dir)
  work_dir = Path(work_dir)
  if not icon_dir.is_dir():
    raise PackagingError(f"Icon directory {icon_dir} not found")

  root_files = [
    (work_dir / MANIFEST_NAME, MANIFEST_NAME),
    (Path(website_path), WEBSITE_ARCHIVE_NAME),
    (work_dir / SIGNATURE_NAME, SIGNATURE_NAME),
  ]
  for path, _ in root_files:
    if not path.is_file():
      raise PackagingError(f"Cannot package {path}: file not found")

  buf = io.BytesIO()
  try:
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED, strict_timestamps=False) as archive:
      for path in sorted(icon_dir.rglob("*")):
        if path.is_file():
          archive.write(path, arcname=f"{ICONSET_ARCHIVE_DIR}/{path.relative_to(icon_dir).as_posix()}")
      for path, arcname in root_files:
        archive.write(path, arcname=arcname)
  except (OSError, ValueError) as exc:
    raise PackagingError(f"Cannot read package contents: {exc}") from exc

  package_path = Path(output_dir) / PACKAGE_NAME
  try:
    package_path.parent.mkdir(parents=True, exist_ok=True)
    package_path.write_bytes(buf.getvalue())
  except OSError as exc:
    raise PackagingError(f"Cannot write {package_path}: {exc.strerror or exc}") from exc
  print(f"Wrote push package -> {package_path}")
  return package_path
