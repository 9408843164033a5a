"""Pre-flight checks for website.json and the icon set."""
from __future__ import annotations

import json
from pathlib import Path
from typing import List

from pydantic import ValidationError

from pushpkg.app.models import ValidationReport, WebsiteModel

REQUIRED_WEBSITE_PARAMS = [
  "websiteName",
  "websitePushID",
  "allowedDomains",
  "urlFormatString",
  "authenticationToken",
  "webServiceURL",
]
REQUIRED_ICONSET_FILES = [
  "icon_16x16.png",
  "icon_16x16@2x.png",
  "icon_32x32.png",
  "icon_32x32@2x.png",
  "icon_128x128.png",
  "icon_128x128@2x.png",
]


def _check_fields(data: dict) -> List[str]:
  try:
    WebsiteModel.model_validate(data)
  except ValidationError as exc:
    failed = {str(error["loc"][0]) for error in exc.errors() if error["loc"]}
    return [f"Field {name} of website.json is required" for name in REQUIRED_WEBSITE_PARAMS if name in failed]
  return []


def validate_website(website_path: Path, icon_dir: Path) -> ValidationReport:
  """Collects every problem with the descriptor and icon set.

  Problems are printed as they are found but never raised; whether a
  failing report stops the build is up to the caller.
  """
  report = ValidationReport()

  try:
    data = json.loads(Path(website_path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
      raise ValueError("expected a JSON object")
  except (OSError, ValueError) as exc:
    report.problems.append(f"Invalid website.json file: {exc}")
  else:
    report.problems.extend(_check_fields(data))
    if not report.problems:
      report.website = WebsiteModel.model_validate(data)

  for name in REQUIRED_ICONSET_FILES:
    icon_path = Path(icon_dir) / name
    if not icon_path.is_file():
      report.problems.append(f"Icon file in path {icon_path} not found")

  for problem in report.problems:
    print(problem)
  return report
