from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from atlas_mapper.config.loader import AppConfig, ConfigError, load_config
from atlas_mapper.logging.drop_log import DropLogBuffer
from atlas_mapper.logging.init import enable_debug, log_summary, setup_logging
from atlas_mapper.models.materialize_result import MaterializeResult
from atlas_mapper.reader.table_reader import RawRow, ReaderError, read_rows_from_parts
from atlas_mapper.services.analysis import analyze_rows, render_report
from atlas_mapper.services.export import export_csv
from atlas_mapper.services.filtering import ALL_CATEGORIES, SortSpec, filter_and_sort, unique_categories
from atlas_mapper.services.headers import HeaderResolutionError
from atlas_mapper.services.materializer import materialize
from atlas_mapper.services.summary import render_summary_line
from atlas_mapper.services.worker import DataWorkerClient, WorkerError

"""CLI entrypoint.

Flow:
- Load .env, then the YAML config (--config, $ATLAS_MAPPER_CONFIG or config/atlas.yml)
- Read and concatenate the input files
- Materialize (in-process, or on the background worker with --worker)
- Filter/sort, then optionally export CSV and/or JSON
- Print the SUMMARY line
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

CONFIG_ENV_VAR = "ATLAS_MAPPER_CONFIG"


def _load_env_file(path: Path) -> None:
    """Load .env without overriding variables already set in the process."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="atlas-mapper",
        description="Normalize historical atlas index coordinates into decimal degrees",
    )
    p.add_argument("inputs", nargs="+", type=Path, help="CSV/XLSX/JSON file(s); several files are concatenated as parts")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--export", type=Path, default=None, help="Write visible points as quoted CSV")
    p.add_argument("--json", type=Path, default=None, help="Write visible points as a JSON array")
    p.add_argument("--category", default=ALL_CATEGORIES, help="Keep only this category (default: all)")
    p.add_argument("--search", default="", help="Case-insensitive full-row search")
    p.add_argument("--sort-key", default=None, help="Column or virtual field to sort by")
    p.add_argument("--sort-desc", action="store_true", help="Sort descending")
    p.add_argument("--worker", action="store_true", help="Materialize on a background worker thread")
    p.add_argument("--analyze", action="store_true", help="Print a parse-rate/category report then exit")
    p.add_argument("--inspect-data", action="store_true", help="Print headers & first rows then exit")
    p.add_argument("--strip-translation", action="store_true", help="Truncate bilingual headers at '/'")
    p.add_argument("--drop-log", action="store_true", help="Write dropped rows/segments to logs/drops-*.log")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _inspect_data(rows: list[RawRow]) -> int:
    if not rows:
        print("inspect: no data rows")
        return EXIT_SUCCESS
    print(f"HEADERS: {list(rows[0].keys())}")
    print("  sample_rows=", json.dumps(rows[:3], ensure_ascii=False))
    return EXIT_SUCCESS


def _analyze(rows: list[RawRow], cfg: AppConfig, logger: logging.Logger) -> int:
    try:
        report = analyze_rows(
            rows,
            candidates=cfg.headers,
            placeholders=cfg.placeholders,
            default_category=cfg.default_category,
        )
    except HeaderResolutionError as e:
        logger.error(f"analyze: {e}")
        return EXIT_FATAL
    for line in render_report(report):
        print(line)
    return EXIT_SUCCESS


def _materialize(
    rows: list[RawRow],
    cfg: AppConfig,
    use_worker: bool,
    drop_log: DropLogBuffer | None,
) -> MaterializeResult:
    options = cfg.materialize_options()
    if not use_worker:
        return materialize(rows, options=options, drop_sink=drop_log)
    with DataWorkerClient(options) as client:
        return client.process_raw_data(rows, drop_sink=drop_log)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    args = _parse_args(sys.argv[1:] if argv is None else argv)
    _load_env_file(Path(".env"))

    if args.debug:
        enable_debug(logger)
        logger.debug("debug mode enabled")

    config_path = args.config
    if config_path is None and os.getenv(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR])
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        rows = read_rows_from_parts(args.inputs, strip_translation=args.strip_translation)
    except ReaderError as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL
    logger.info(f"Loaded {len(rows)} rows from {len(args.inputs)} file(s)")

    if args.inspect_data:
        return _inspect_data(rows)
    if args.analyze:
        return _analyze(rows, cfg, logger)

    drop_log = DropLogBuffer() if args.drop_log else None
    try:
        result = _materialize(rows, cfg, args.worker, drop_log)
    except WorkerError as e:
        logger.error(f"worker: {e}")
        return EXIT_FATAL
    finally:
        if drop_log is not None:
            path = drop_log.flush()
            if path is not None:
                logger.info(f"drop log written: {path}")

    if not result.ok:
        logger.error(f"materialize: {result.error}")
        return EXIT_FATAL

    sort = None
    if args.sort_key:
        sort = SortSpec(args.sort_key, "desc" if args.sort_desc else "asc")
    visible = filter_and_sort(result.points, args.category, args.search, sort)
    logger.info(
        f"visible points={len(visible)} of {len(result.points)} categories={len(unique_categories(visible, cfg.default_category))}"
    )

    export_path = args.export or (Path(cfg.export_path) if cfg.export_path else None)
    if export_path is not None:
        export_csv(visible, export_path)
        logger.info(f"exported {len(visible)} points to {export_path}")

    if args.json is not None:
        args.json.parent.mkdir(parents=True, exist_ok=True)
        args.json.write_text(
            json.dumps([p.to_dict() for p in visible], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        logger.info(f"wrote {len(visible)} points to {args.json}")

    summary_line = render_summary_line(result.stats)
    # log_summary adds the "SUMMARY " prefix itself
    log_summary(summary_line[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
