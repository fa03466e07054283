"""CLI that regenerates the dependency manifest and publishes it into the layer."""
from __future__ import annotations

import argparse
import dataclasses
import os
from pathlib import Path
from typing import Mapping, Optional, Sequence

from recipe_sync import logger
from recipe_sync.configuration import load_settings, resolve_config
from recipe_sync.errors import SyncError
from recipe_sync.pipeline import SyncPipeline

EXIT_OK = 0
EXIT_UNEXPECTED = 1


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="recipe-sync",
        description=__doc__,
        epilog="Project paths are read from REL_DIR, TULIP, META, CARGO_BITBAKE and BRANCH.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the tool settings YAML (defaults to $RECIPE_SYNC_CONFIG or config/config.yaml)",
    )
    parser.add_argument(
        "--allow-empty",
        action="store_true",
        default=None,
        help="Succeed without copying anything when the generator produced no files",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Abort the generator after this many seconds (no limit by default)",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Also write the log to <dir>/recipe_sync.log",
    )
    args = parser.parse_args(argv)
    if args.timeout is not None and args.timeout <= 0:
        parser.error("--timeout must be a positive number of seconds")
    return args


def main(argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    args = parse_args(argv)
    if environ is None:
        environ = os.environ

    try:
        settings = load_settings(args.config, environ)
        overrides = {}
        if args.allow_empty is not None:
            overrides["allow_empty"] = args.allow_empty
        if args.timeout is not None:
            overrides["timeout"] = args.timeout
        if args.log_dir is not None:
            overrides["log_dir"] = args.log_dir
        if overrides:
            settings = dataclasses.replace(settings, **overrides)

        # nothing may touch the disk before the project environment is valid
        config = resolve_config(environ)
        if settings.log_dir is not None:
            logger.attach_log_file(settings.log_dir)

        SyncPipeline(settings).run(config=config)
    except SyncError as exc:
        logger.err(f"Этап '{exc.stage}' завершился ошибкой: {exc}")
        return exc.exit_code
    except Exception as exc:
        logger.err(f"Непредвиденная ошибка: {exc!r}")
        return EXIT_UNEXPECTED
    finally:
        logger.close()
    return EXIT_OK
