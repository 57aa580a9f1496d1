"""Command line interface for safe_uploader package."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional, Sequence

from rich.logging import RichHandler

from .cli_render import render_configuration_summary, render_run_result


CONFIG_ENV_VAR = "SAFE_UPLOADER_CONFIG"


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug or --log-level is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _parse_payload(items: Optional[Sequence[str]]) -> Dict[str, str]:
    """Turn repeated KEY=VALUE options into a payload mapping."""
    payload: Dict[str, str] = {}
    for item in items or []:
        if "=" not in item:
            raise CLIError(f"payload entries must look like KEY=VALUE, got: {item}")
        key, value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise CLIError(f"payload entry has an empty key: {item}")
        payload[key] = _strip_optional_quotes(value.strip())
    return payload


def _run_upload(
    profile_id: str,
    source: Path,
    config_file: str,
    payload: Dict[str, str],
    collect: bool,
) -> int:
    from safe_uploader import ErrorMode, SafeUploader, SafeUploaderError

    mode = ErrorMode.COLLECT if collect else ErrorMode.RAISE
    uploader = SafeUploader(config_file, error_mode=mode)
    try:
        result = uploader.upload_file(profile_id, str(source), payload)
    except SafeUploaderError as exc:
        render_run_result(uploader.last_result)
        # A failed thumbnail still leaves the primary file placed
        if uploader.last_result.success:
            return 0
        raise CLIError(str(exc)) from exc

    render_run_result(result)
    return 0 if result.success else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="safe-upload",
        description="Validate a file against a profile and move it to its destination.",
    )
    parser.add_argument("profile", nargs="?", help="Profile identifier in the configuration")
    parser.add_argument("source", nargs="?", type=Path, help="Source file path")
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help=f"Profiles configuration file (default from {CONFIG_ENV_VAR})",
    )
    parser.add_argument(
        "-p",
        "--payload",
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Tag value for path templates (repeatable)",
    )
    parser.add_argument(
        "--collect",
        action="store_true",
        help="Collect every failure instead of stopping at the first one",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="safe-upload (from safe_uploader)",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.profile is None or args.source is None:
        parser.print_help()
        return 0

    source = Path(args.source).expanduser()
    config_file = args.config or os.getenv(CONFIG_ENV_VAR)
    if not config_file:
        print(f"ERROR: no configuration file (use --config or {CONFIG_ENV_VAR})", file=sys.stderr)
        return 1

    try:
        payload = _parse_payload(args.payload)
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    render_configuration_summary(
        {
            "Profile": args.profile,
            "Source": str(source),
            "Config": config_file,
            "Payload": ", ".join(f"{k}={v}" for k, v in payload.items()) or "-",
            "Errors": "collect" if args.collect else "raise",
            "Env File": str(used_env_file) if used_env_file else "-",
            "Logging": effective_log_mode,
        }
    )

    try:
        return _run_upload(args.profile, source, config_file, payload, args.collect)
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
