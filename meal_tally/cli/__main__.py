from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from meal_tally.config.loader import ConfigError, apply_overrides, load_config
from meal_tally.logging.init import log_summary, set_debug, setup_logging
from meal_tally.services.names import NameNormalizer
from meal_tally.services.orchestrator import ProcessingError, process_all
from meal_tally.services.reconciler import merge_into_template
from meal_tally.services.report import SORT_MODES, filter_lines, render_table, sort_lines, write_csv
from meal_tally.services.summary import render_summary

"""CLI entrypoint.

Flow:
- Load .env and the YAML config, apply command line overrides
- Tally the given workbooks / directories in order
- Print the report table, optionally write CSV and merge into a template
- Emit one SUMMARY line
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env via python-dotenv; a broken file only warns."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except Exception as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="meal-tally", description="Monthly meal tally from attendance workbooks")
    p.add_argument("inputs", nargs="+", type=Path, help="Attendance workbooks or directories, processed in order")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--name-col", default=None, help="Name column letter (default E)")
    p.add_argument("--meal-cols", default=None, help="Meal column letters, first is primary (default I,J,K,L)")
    p.add_argument("--first-row", type=int, default=None, help="Force 1-based first data row (0 = auto-detect)")
    p.add_argument("--csv", type=Path, default=None, help="Write the report as CSV")
    p.add_argument("--template", type=Path, default=None, help="Report template workbook to merge totals into")
    p.add_argument("--template-out", type=Path, default=None, help="Merged template output (default <template>_merged)")
    p.add_argument("--search", default=None, help="Only show people whose name contains this text")
    p.add_argument("--sort", choices=SORT_MODES, default=None, help="Sort the printed report")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _default_template_out(template: Path) -> Path:
    return template.with_name(f"{template.stem}_merged{template.suffix}")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] from tests must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug()

    try:
        cfg = load_config(args.config)
        cfg = apply_overrides(
            cfg,
            name_column=args.name_col,
            meal_columns=args.meal_cols,
            first_row=args.first_row,
        )
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    logger.debug(f"config source={args.config or os.getenv('MEAL_TALLY_CONFIG') or 'defaults'} columns={cfg.columns}")

    try:
        result = process_all(args.inputs, cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if result.total_files == 0:
        logger.error("no workbooks found")
        return EXIT_FATAL
    if result.success_files == 0:
        logger.error("no workbook could be read")
        log_summary(render_summary(result))
        return EXIT_FATAL

    shown = sort_lines(filter_lines(result.lines, args.search), args.sort)
    print(render_table(shown))

    if args.csv is not None:
        write_csv(result.lines, args.csv)
        logger.info(f"csv written: {args.csv}")

    if args.template is not None:
        out = args.template_out or _default_template_out(args.template)
        try:
            merge_into_template(result.lines, args.template, out, cfg.template, NameNormalizer(cfg.stop_words))
        except ProcessingError as e:
            logger.error(f"template: {e}")
            return EXIT_FATAL

    logger.info(f"Done. Processed {result.total_files} file(s). People found: {result.people}.")
    log_summary(render_summary(result))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
