"""Runs validation, manifest, signature and packaging in order."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from pushpkg.assemble_package import PackagingError, assemble_package
from pushpkg.build_manifest import MANIFEST_NAME, ManifestError, build_manifest, get_file_list
from pushpkg.sign_manifest import Signer, SigningError, write_signature
from pushpkg.website import validate_website

from .models import ValidationReport


class ValidationFailed(RuntimeError):
  pass


class PipelineState(str, Enum):
  VALIDATING = "validating"
  MANIFEST_BUILT = "manifest_built"
  SIGNED = "signed"
  PACKAGED = "packaged"
  DONE = "done"
  ABORTED = "aborted"


@dataclass
class PackageOptions:
  website_path: Path
  icon_dir: Path
  output_dir: Path
  work_dir: Path


@dataclass
class PipelineResult:
  state: PipelineState
  report: ValidationReport
  manifest_path: Optional[Path] = None
  signature_path: Optional[Path] = None
  package_path: Optional[Path] = None
  error: Optional[Exception] = None

  @property
  def ok(self) -> bool:
    return self.state is PipelineState.DONE


def build_push_package(options: PackageOptions, signer: Signer, strict: bool = False) -> PipelineResult:
  """Builds pushPackage.zip, stopping at the first failing stage.

  Validation problems only stop the run when ``strict`` is set. Build
  products written before a failure stay on disk.
  """
  result = PipelineResult(state=PipelineState.VALIDATING, report=ValidationReport())
  result.report = validate_website(options.website_path, options.icon_dir)
  try:
    if strict and not result.report.ok:
      raise ValidationFailed(f"website.json or icon set has {len(result.report.problems)} problem(s)")

    files = get_file_list(options.website_path, options.icon_dir)
    manifest = build_manifest(files, options.work_dir)
    result.manifest_path = Path(options.work_dir) / MANIFEST_NAME
    result.state = PipelineState.MANIFEST_BUILT

    result.signature_path = write_signature(signer.sign(manifest), options.work_dir)
    result.state = PipelineState.SIGNED

    result.package_path = assemble_package(options.icon_dir, options.website_path, options.work_dir, options.output_dir)
    result.state = PipelineState.PACKAGED
  except (ValidationFailed, ManifestError, SigningError, PackagingError) as exc:
    result.state = PipelineState.ABORTED
    result.error = exc
    return result

  result.state = PipelineState.DONE
  return result
