"""File and directory paths for the incident forecasting project."""

from __future__ import annotations

from pathlib import Path

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# ============================================================================
# BASE DIRECTORIES
# ============================================================================

DATA_DIR = PROJECT_ROOT / "data"
RESULTS_DIR = PROJECT_ROOT / "results"

# ============================================================================
# PIPELINE - File paths
# ============================================================================

# Local CSV export of the incident table (read by the CLI only)
INCIDENTS_FILE = DATA_DIR / "incidents.csv"

# JSON summary written by the CLI when --report is given without a path
COUNTERFACTUAL_REPORT_FILE = RESULTS_DIR / "counterfactual_report.json"

# Log file written by the CLI when --log-file is given without a path
PIPELINE_LOG_FILE = RESULTS_DIR / "logs" / "counterfactual_pipeline.log"
