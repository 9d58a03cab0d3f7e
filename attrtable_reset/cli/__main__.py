from __future__ import annotations

import argparse
import os
import signal
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from attrtable_reset.config.loader import DEFAULT_CONFIG_PATH, ConfigError, ReinitConfig, load_config
from attrtable_reset.exceptions import AttributeStoreError, ReinitError
from attrtable_reset.logging.error_log import ErrorLogBuffer
from attrtable_reset.logging.init import enable_debug, get_logger, log_summary, setup_logging
from attrtable_reset.models.operation_result import ReinitResult
from attrtable_reset.services.host import ConsoleHost
from attrtable_reset.services.paths import derive_attribute_path
from attrtable_reset.services.reinitializer import Reinitializer
from attrtable_reset.services.summary import render_summary_line
from attrtable_reset.shapefile_io.attribute_store import read_attribute_table
from attrtable_reset.shapefile_io.geometry import count_features

"""CLI entrypoint.

Flow:
- Load .env and the YAML config
- Run one reinitialization on the positional input (or the interactive prompt)
- Ctrl-C requests cooperative cancellation
- Print one SUMMARY line and map the outcome to an exit code
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_CANCELLED = 2

CONFIG_ENV_VAR = "ATTRTABLE_RESET_CONFIG"
INPUT_PROMPT = "Input Vector File: "
PREVIEW_ROWS = 5


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv; failures only produce a warning."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="reinit-attribute-table",
        description="Replace a shapefile's attribute table with a single sequential FID field",
    )
    p.add_argument("input", nargs="?", help="Input vector file (.shp)")
    p.add_argument("--config", type=Path, help=f"YAML config (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--legacy-paths",
        action="store_true",
        help="Derive the .dbf path by replacing the first '.shp' anywhere in the path",
    )
    p.add_argument("--interactive", action="store_true", help="Prompt for the input file if none is given")
    p.add_argument("--inspect", action="store_true", help="Print feature count and current attribute table, then exit")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> ReinitConfig:
    if args.config is not None:
        cfg = load_config(args.config, required=True)
    elif os.getenv(CONFIG_ENV_VAR):
        cfg = load_config(Path(os.environ[CONFIG_ENV_VAR]), required=True)
    else:
        cfg = load_config(DEFAULT_CONFIG_PATH)
    if args.legacy_paths:
        cfg = replace(cfg, path_derivation="legacy")
    return cfg


@contextmanager
def _cancel_on_interrupt(host: ConsoleHost) -> Iterator[None]:
    """Route SIGINT to host.request_cancel() while a run is in progress."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, frame):  # noqa: ARG001
        print("WARNING: interrupt received, cancelling at next progress step", file=sys.stderr)
        host.request_cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _inspect(geometry: Path, cfg: ReinitConfig) -> int:
    logger = get_logger()
    try:
        count = count_features(geometry)
        dbf_path = Path(
            derive_attribute_path(
                geometry,
                geometry_extension=cfg.geometry_extension,
                attribute_extension=cfg.attribute_extension,
                mode=cfg.path_derivation,
            )
        )
    except ReinitError as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL

    print(f"FILE: {geometry.name} features={count}")
    if not dbf_path.exists():
        print(f"  TABLE: {dbf_path.name} missing")
        return EXIT_SUCCESS
    try:
        table = read_attribute_table(dbf_path, encoding=cfg.encoding)
    except AttributeStoreError as e:
        print(f"  TABLE: {dbf_path.name} read_error={e}")
        return EXIT_SUCCESS
    fields = ", ".join(f"{name}:{code}({width},{decimals})" for name, code, width, decimals in table.fields)
    print(f"  TABLE: {dbf_path.name} rows={len(table.records)} fields=[{fields}]")
    if table.records:
        frame = pd.DataFrame(table.records, columns=table.field_names)
        print(frame.head(PREVIEW_ROWS).to_string(index=False))
    return EXIT_SUCCESS


def _exit_code(result: ReinitResult) -> int:
    if result.ok:
        return EXIT_SUCCESS
    if result.cancelled:
        return EXIT_CANCELLED
    return EXIT_FATAL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only read sys.argv when no list is given; main([]) means "no arguments".
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        enable_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect:
        if not args.input:
            logger.error("inspect: no input file given")
            return EXIT_FATAL
        return _inspect(Path(args.input), cfg)

    tool_args: list[str] = [args.input] if args.input else []
    if not tool_args and args.interactive:
        try:
            answer = input(INPUT_PROMPT).strip()
        except (EOFError, KeyboardInterrupt):
            # No answer: falls through to the invalid-arguments path
            print()
            answer = ""
        if answer:
            tool_args = [answer]

    with ConsoleHost(ErrorLogBuffer(cfg.logs_dir), current_file=tool_args[0] if tool_args else "") as host:
        with _cancel_on_interrupt(host):
            result = Reinitializer(host, cfg).reinitialize(tool_args)

    # log_summary adds the "SUMMARY " prefix itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return _exit_code(result)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
