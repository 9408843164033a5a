from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .deps import PasswordProvider, get_password_provider, get_signer
from .pipeline import PackageOptions, build_push_package
from .settings import SIGNERS, get_settings


def build_parser() -> argparse.ArgumentParser:
  ap = argparse.ArgumentParser(prog="pushpkg", description="Build a signed pushPackage.zip for web push notifications.")
  ap.add_argument("-w", "--website-json", default="website.json", help="The path to website.json file")
  ap.add_argument("-i", "--icon-set", default="icon.iconset", help="The path to the iconset directory")
  ap.add_argument("-c", "--certificate", required=True, help="The path to the p12 file used for signing manifest.json")
  ap.add_argument(
    "-z",
    "--intermediate-certificate",
    required=True,
    help="The path to the Apple WWDR Intermediate Certificate (.crt or .cer file)",
  )
  ap.add_argument("-p", "--password", action="store_true", help="Input the certificate password on stdin")
  ap.add_argument("-o", "--output-dir", default=".", help="The output path for pushPackage.zip")
  ap.add_argument("--strict", action="store_true", default=None, help="Abort when website.json or the icon set is invalid")
  ap.add_argument("--signer", choices=SIGNERS, default=None, help="Signing backend (default from PUSHPKG_SIGNER)")
  ap.add_argument("--work-dir", default=None, help="Where manifest.json and signature are written")
  return ap


def main(argv: Optional[List[str]] = None, password_provider: Optional[PasswordProvider] = None) -> int:
  args = build_parser().parse_args(argv)
  try:
    settings = get_settings()
  except ValueError as exc:
    print(f"Invalid configuration: {exc}", file=sys.stderr)
    return 1

  options = PackageOptions(
    website_path=Path(args.website_json),
    icon_dir=Path(args.icon_set),
    output_dir=Path(args.output_dir),
    work_dir=Path(args.work_dir) if args.work_dir else settings.work_dir,
  )
  provider = password_provider or get_password_provider(args.password)
  signer = get_signer(settings, Path(args.certificate), Path(args.intermediate_certificate), provider, signer=args.signer)
  strict = settings.strict if args.strict is None else args.strict

  result = build_push_package(options, signer, strict=strict)
  if not result.ok:
    print(f"Failed to build push package: {result.error}", file=sys.stderr)
    return 1
  return 0


if __name__ == "__main__":
  raise SystemExit(main())
