"""Configuration loader for pedigree_py.

Behavior:
- Load defaults.
- If environment variable `PEDIGREE_CONFIG` is set, load that JSON file and merge.
- Environment variables override file values (PEDIGREE_DATA_DIR,
  PEDIGREE_DEFAULT_GENERATIONS, PEDIGREE_LOG_LEVEL, PEDIGREE_INFER_COEFFICIENTS).
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import os
import json
import logging
from typing import Any, Optional

from .ancestry import MAX_GENERATIONS
from .diversity import Thresholds
from .errors import ValidationError


@dataclass
class Config:
    data_dir: Path = Path("data")
    default_generations: int = 6
    max_generations: int = MAX_GENERATIONS
    moderate_threshold: float = 0.0625
    high_threshold: float = 0.125
    very_high_threshold: float = 0.25
    infer_ancestor_coefficients: bool = False
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        # the hard ceiling cannot be raised by configuration
        self.max_generations = max(1, min(int(self.max_generations), MAX_GENERATIONS))
        self.default_generations = max(1, min(int(self.default_generations), self.max_generations))
        try:
            self.thresholds = Thresholds(self.moderate_threshold, self.high_threshold, self.very_high_threshold)
        except ValueError as exc:
            raise ValidationError(f"Invalid risk thresholds in configuration: {exc}", field="thresholds") from exc


def _load_json_file(path: Path) -> Optional[dict]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        logging.warning("Could not read config file %s; using defaults", path)
        return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from (1) defaults, (2) JSON file, (3) env vars.

    :param config_path: optional path to a JSON config file. If not provided
                        will use environment variable `PEDIGREE_CONFIG` if set.
    """
    values: dict = {}

    cp = config_path or os.environ.get("PEDIGREE_CONFIG")
    if cp:
        data = _load_json_file(Path(cp))
        if isinstance(data, dict):
            if data.get("data_dir"):
                values["data_dir"] = Path(data["data_dir"])
            for key in ("default_generations", "max_generations"):
                if key in data:
                    values[key] = int(data[key])
            for key in ("moderate_threshold", "high_threshold", "very_high_threshold"):
                if key in data:
                    values[key] = float(data[key])
            if "infer_ancestor_coefficients" in data:
                values["infer_ancestor_coefficients"] = _as_bool(data["infer_ancestor_coefficients"])
            if data.get("log_level"):
                values["log_level"] = str(data["log_level"]).upper()

    # An explicit config_path is authoritative: environment variables only
    # apply when the caller did not name a file.
    if config_path is None:
        if os.environ.get("PEDIGREE_DATA_DIR"):
            values["data_dir"] = Path(os.environ["PEDIGREE_DATA_DIR"])
        if os.environ.get("PEDIGREE_DEFAULT_GENERATIONS"):
            values["default_generations"] = int(os.environ["PEDIGREE_DEFAULT_GENERATIONS"])
        if os.environ.get("PEDIGREE_LOG_LEVEL"):
            values["log_level"] = os.environ["PEDIGREE_LOG_LEVEL"].upper()
        if os.environ.get("PEDIGREE_INFER_COEFFICIENTS"):
            values["infer_ancestor_coefficients"] = _as_bool(os.environ["PEDIGREE_INFER_COEFFICIENTS"])

    return Config(**values)
