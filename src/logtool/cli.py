from __future__ import annotations

import argparse
import io
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from logtool.core.config import BUFFER_SIZE, FLUSH_INTERVAL, MAX_SIZE, LogConfig, resolve_config
from logtool.core.models import Level
from logtool.facade import LogTool
from logtool.stdlib import LevelStream

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    level_name = os.getenv("LOGTOOL_LOG_LEVEL", "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_threshold(s: str) -> Level:
    try:
        return Level.parse(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _parse_line_level(s: str) -> Level:
    # "output" routes [D]/[I]/[W]/[E] marked lines to their level.
    if s.strip().lower() == Level.DEFAULT.file_name:
        return Level.DEFAULT
    return _parse_threshold(s)


def _positive_int(s: str) -> int:
    try:
        value = int(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{s}'") from e
    if value < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return value


def _positive_float(s: str) -> float:
    try:
        value = float(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected a number, got '{s}'") from e
    if value <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="logtool",
        description="Write stdin lines into per-level, hourly rotated log files.",
    )
    p.add_argument("--logname", default="logtool", help="Log name (subdirectory under <logpath>/logs)")
    p.add_argument("--logpath", default="/data", help="Base path for log files (default: /data)")
    p.add_argument(
        "--loglevel",
        type=_parse_threshold,
        default=Level.DEBUG,
        help="Minimum level written [debug, info, warn, error] (default: debug)",
    )
    p.add_argument(
        "--level",
        dest="line_level",
        type=_parse_line_level,
        default=Level.INFO,
        help="Level for each stdin line [output, debug, info, warn, error, action] (default: info)",
    )
    p.add_argument(
        "--alsostdout",
        dest="also_stdout",
        action="store_true",
        help="Echo records to stdout (default)",
    )
    p.add_argument("--no-alsostdout", dest="also_stdout", action="store_false", help="Only write files")
    p.set_defaults(also_stdout=True)
    p.add_argument(
        "--max-size", type=_positive_int, default=MAX_SIZE, help="Bytes per file before a new slot"
    )
    p.add_argument(
        "--buffer-size", type=_positive_int, default=BUFFER_SIZE, help="Write buffer per file in bytes"
    )
    p.add_argument(
        "--flush-interval",
        type=_positive_float,
        default=FLUSH_INTERVAL,
        help="Seconds between background flushes (default: 5)",
    )
    return p


def main(argv: Sequence[str] | None = None) -> None:
    _configure_logging()
    args = build_parser().parse_args(argv)

    try:
        cfg = resolve_config(
            LogConfig(
                log_name=args.logname,
                base_path=Path(args.logpath),
                level=args.loglevel,
                also_stdout=args.also_stdout,
                max_size=args.max_size,
                buffer_size=args.buffer_size,
                flush_interval=args.flush_interval,
            )
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    tool = LogTool(cfg)
    tool.init(cfg.log_name, cfg.level, cfg.also_stdout)
    stream = LevelStream(tool, args.line_level)
    LOGGER.debug("writing stdin to %s/logs/%s", cfg.base_path, cfg.log_name)

    if isinstance(sys.stdin, io.TextIOWrapper):
        # Piped process output is not always valid UTF-8.
        sys.stdin.reconfigure(errors="replace")

    try:
        for line in sys.stdin:
            stream.write(line)
    except KeyboardInterrupt:
        LOGGER.debug("interrupted; flushing")
    finally:
        stream.flush()
        tool.close()


if __name__ == "__main__":
    main()
