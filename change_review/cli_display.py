"""
CLI display — file logging setup and the change summary block printed
after a review.
"""

import logging
import os
from datetime import datetime

from .editing.summary import (
    ChangesSummary, RiskThresholds, classify_risk, describe_changes,
)

_RISK_COLORS = {"low": "\033[32m", "medium": "\033[33m", "high": "\033[31m"}
_RESET = "\033[0m"


def setup_logger(log_dir: str = ".change_review/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"review_{timestamp}.log")

    logger = logging.getLogger("change_review")
    logger.setLevel(logging.DEBUG)

    # File handler — captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


def format_summary(summary: ChangesSummary, entries: list,
                   thresholds: RiskThresholds | None = None,
                   color: bool = True) -> str:
    """Render the change summary block printed after a review."""
    risk = classify_risk(summary, thresholds)
    label = risk.label
    if color:
        label = f"{_RISK_COLORS.get(risk.level, '')}{label}{_RESET}"

    lines = [
        f"  Files changed : {summary.files_changed}",
        f"  Additions     : +{summary.additions}",
        f"  Deletions     : -{summary.deletions}",
        f"  Risk          : {label}",
    ]
    for warning in risk.warnings:
        lines.append(f"    ! {warning}")
    for entry in entries:
        lines.append(f"  [{entry.status:<8}] {entry.type:<8} {entry.path}")
    lines.append("")
    lines.append(f"  {describe_changes(entries, summary)}")
    return "\n".join(lines)
