"""Command line entry point: ota-publish."""

import argparse
import logging
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from publisher.errors import ManifestError, PublishError
from publisher.models.config import PublishConfig
from publisher.models.status import ExitCode
from publisher.services.publish import PublishService
from publisher.utils.logging import setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ota-publish",
        description=(
            "Compile an ESPHome device, publish firmware.ota.bin and manifest.json "
            "under the static hosting directory, and commit/push them."
        ),
        epilog=(
            "Environment overrides: VERSION, BASE_URL, OUT_ROOT, BIN_OUT_NAME, DEVICE_NAME, "
            "CHIP_FAMILY, ESPHOME_RUNNER, ESPHOME_IMAGE, GIT_REMOTE, GIT_BRANCH, SKIP_GIT, "
            "LOG_FILE, LOG_LEVEL"
        ),
    )
    parser.add_argument("config", help="path/to/device.yaml")
    parser.add_argument(
        "chip_family", nargs="?", help="chipFamily, e.g. ESP32, ESP32-C3, ESP8266"
    )
    parser.add_argument("--version", dest="version", help="build version (default: YYYY.MM.DD-HHMM)")
    parser.add_argument("--base-url", help="URL serving the output root, e.g. https://<user>.github.io/<repo>/firmware")
    parser.add_argument("--out-root", help="output root (default: docs/firmware)")
    parser.add_argument("--name", dest="device_name", help="device name (default: YAML file stem)")
    parser.add_argument(
        "--docker", action="store_const", const="docker", dest="runner",
        help="compile with the ESPHome container image instead of the local CLI",
    )
    parser.add_argument("--image", help="ESPHome container image for --docker")
    parser.add_argument("--remote", dest="git_remote", help="git remote (default: origin)")
    parser.add_argument("--branch", dest="git_branch", help="git branch to push")
    parser.add_argument(
        "--skip-git", action="store_true", default=None,
        help="write the files but do not commit or push",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one publish and return the process exit code."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors and 0 for --help
        return int(e.code or 0)

    try:
        config = PublishConfig.from_sources(
            args.config,
            args.chip_family,
            version=args.version,
            base_url=args.base_url,
            out_root=args.out_root,
            device_name=args.device_name,
            runner=args.runner,
            image=args.image,
            git_remote=args.git_remote,
            git_branch=args.git_branch,
            skip_git=args.skip_git,
            log_level=logging.DEBUG if args.verbose else None,
        )
    except ValidationError as e:
        parser.print_usage(sys.stderr)
        print(f"ERROR: invalid arguments: {e}", file=sys.stderr)
        return ExitCode.USAGE

    if not config.config_path.is_file():
        print(f"ERROR: config file not found: {config.config_path}", file=sys.stderr)
        return ExitCode.USAGE

    logger = setup_logger("publisher", config.log_file, level=config.log_level)

    try:
        result = PublishService(config).run()
    except PublishError as e:
        logger.error(f"ERROR: {e}")
        return e.exit_code
    except (ManifestError, OSError) as e:
        logger.error(f"ERROR: {e}")
        return ExitCode.FAILED

    logger.debug(f"Published {result.name} {result.version} (committed={result.committed})")
    return ExitCode.OK


def run() -> None:
    """Console script wrapper."""
    sys.exit(int(main()))


if __name__ == "__main__":
    run()
