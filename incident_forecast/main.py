"""CLI entry point: counterfactual forecast from a local incident CSV export."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

# Ensure project root on path for direct execution
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from incident_forecast.arima.model_selection import SearchConfig
from incident_forecast.config_logging import setup_logging
from incident_forecast.constants import (
    DATE_COLUMN,
    DEFAULT_CUTOFF_DATE,
    FORECAST_CONFIDENCE_LEVEL,
    FORECAST_HORIZON,
)
from incident_forecast.data_cleaning import frame_to_records
from incident_forecast.exceptions import ModelFitError
from incident_forecast.imputation import (
    ImputationStrategy,
    ModalImputation,
    ProportionalImputation,
)
from incident_forecast.path import COUNTERFACTUAL_REPORT_FILE, INCIDENTS_FILE, PIPELINE_LOG_FILE
from incident_forecast.pipeline import run_counterfactual_pipeline
from incident_forecast.utils import get_logger, load_csv_file, save_json_pretty

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Forecast monthly incident counts past a cutoff and compare with observations"
    )
    parser.add_argument(
        "--data-file",
        type=Path,
        default=INCIDENTS_FILE,
        help=f"CSV export of the incident table (default: {INCIDENTS_FILE})",
    )
    parser.add_argument(
        "--cutoff",
        default=DEFAULT_CUTOFF_DATE,
        help=f"First day of the post-shock window (default: {DEFAULT_CUTOFF_DATE})",
    )
    parser.add_argument(
        "--horizon",
        type=int,
        default=FORECAST_HORIZON,
        help=f"Months to forecast (default: {FORECAST_HORIZON})",
    )
    parser.add_argument(
        "--level",
        type=float,
        default=FORECAST_CONFIDENCE_LEVEL,
        help=f"Forecast interval coverage (default: {FORECAST_CONFIDENCE_LEVEL})",
    )
    parser.add_argument(
        "--severity-only",
        action="store_true",
        help="Count only incidents with the severity flag set",
    )
    parser.add_argument(
        "--imputation",
        choices=("modal", "proportional"),
        default="modal",
        help="Perpetrator race imputation strategy (default: modal)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Seed of the proportional imputation (default: 42)",
    )
    parser.add_argument(
        "--n-jobs",
        type=int,
        default=1,
        help="Worker processes for the order search (default: 1)",
    )
    parser.add_argument(
        "--time-budget",
        type=float,
        default=None,
        help="Wall-clock budget of the order search in seconds (default: none)",
    )
    parser.add_argument(
        "--report",
        type=Path,
        nargs="?",
        const=COUNTERFACTUAL_REPORT_FILE,
        default=None,
        help=f"Write a JSON summary (default path: {COUNTERFACTUAL_REPORT_FILE})",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        nargs="?",
        const=PIPELINE_LOG_FILE,
        default=None,
        help=f"Also write the log to a file (default path: {PIPELINE_LOG_FILE})",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages",
    )
    return parser.parse_args(argv)


def _build_strategy(args: argparse.Namespace) -> ImputationStrategy:
    if args.imputation == "proportional":
        return ProportionalImputation(seed=args.seed)
    return ModalImputation()


def main(argv: list[str] | None = None) -> int:
    """Run the counterfactual pipeline on a local CSV export.

    Returns:
        Process exit code: 0 on success, 1 when the run aborts.
    """
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    try:
        raw = load_csv_file(args.data_file, required_columns=[DATE_COLUMN])
        records = frame_to_records(raw)
        logger.info(f"Loaded {len(records)} records from {args.data_file}")

        result = run_counterfactual_pipeline(
            records,
            cutoff=args.cutoff,
            horizon=args.horizon,
            level=args.level,
            severity_only=args.severity_only,
            imputation_strategy=_build_strategy(args),
            search_config=SearchConfig(n_jobs=args.n_jobs, time_budget=args.time_budget),
        )
    except (FileNotFoundError, KeyError, ValueError, ModelFitError) as e:
        logger.error(f"✗ Counterfactual run failed: {e}")
        return 1

    comparison = result.comparison
    logger.info(f"\n✓ Selected {result.selection.best.candidate} (AIC {result.selection.best.aic:.2f})")
    logger.info(
        f"Forecast total {comparison.forecast_total:.1f} "
        f"[{comparison.lower_total:.1f}, {comparison.upper_total:.1f}], "
        f"actual {comparison.actual_total}, "
        f"difference {comparison.difference:+.1f} ({comparison.relative_ratio:.2f}x)"
    )

    if args.report is not None:
        save_json_pretty(result.to_report(), args.report)
        logger.info(f"Saved report: {args.report}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
