# ====================================================================================================
# Where this fits - Tug requirement lookup runner
#
# Command-line counterpart of the shell's "Calculate" button:
#   1) load the reference dataset from disk (src/tugs/loader.py)
#   2) validate the query and look it up (src/tugs/lookup.py)
#   3) print the result, and optionally write an artifact bundle under `--out`
#
# What it takes in:
# - `--data` path to tug_requirements.csv
# - `--location`, `--loa` (as typed), `--operation` (berthing/unberthing)
# - Optional `--profile`, `--config` (JSON base config) and `--override` (JSON overrides)
#
# What it produces under `--out`:
# - `result.json` (query, outcome, matched band, dataset provenance, config_used)
# - `run.log` (console-style log for traceability)
#
# Exit codes: 0 = tugs found, 1 = no matching band, 2 = load/validation error.
# ====================================================================================================

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from subprocess import DEVNULL, CalledProcessError, check_output
from typing import Optional


ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.tugs import (
    OPERATIONS,
    LoadError,
    NoMatch,
    ValidationError,
    apply_overrides,
    compute_result,
    config_from_dict,
    config_to_dict,
    format_result,
    get_config,
    load_dataset_file,
)

EXIT_OK = 0
EXIT_NO_MATCH = 1
EXIT_ERROR = 2


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Look up the tugs required for a berth movement.")
    parser.add_argument("--data", default=str(ROOT / "data" / "tug_requirements.csv"),
                        help="Path to the reference dataset CSV.")
    parser.add_argument("--location", required=True, help="Jetty/location as listed in the dataset.")
    parser.add_argument("--loa", required=True, help="Vessel length overall in metres.")
    parser.add_argument("--operation", choices=list(OPERATIONS), default="berthing")
    parser.add_argument("--profile", default="default", help="Config profile (default/strict).")
    parser.add_argument("--config", help="Optional JSON base config path.")
    parser.add_argument("--override", help="Optional JSON overrides path.")
    parser.add_argument("--out", help="Optional output directory for result.json and run.log.")
    return parser.parse_args(argv)


# ----------------------------------------------------------------------------------------------------
# get_git_commit
# Purpose (simple): Capture the current git commit hash for provenance (best-effort).
# Inputs: `root` (repo root Path)
# Outputs: commit SHA string, or None if git isn't available
# ----------------------------------------------------------------------------------------------------
def get_git_commit(root: Path) -> Optional[str]:
    try:
        return check_output(["git", "rev-parse", "HEAD"], cwd=root, stderr=DEVNULL).decode().strip()
    except (CalledProcessError, FileNotFoundError):
        return None


def _load_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def _build_config_dict(args: argparse.Namespace) -> dict:
    if args.config:
        base_config = _load_json(Path(args.config))
    else:
        base_config = config_to_dict(get_config(args.profile))

    if args.override:
        overrides = _load_json(Path(args.override))
        base_config = apply_overrides(base_config, overrides)

    try:
        config_from_dict(base_config)
    except TypeError as exc:
        raise ValueError(f"Config does not match the AppConfig schema: {exc}") from exc
    return base_config


def _make_logger(out_dir: Optional[Path]) -> logging.Logger:
    name = f"tug_lookup_{out_dir.name}" if out_dir is not None else "tug_lookup"
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False
    if out_dir is not None:
        handler = logging.FileHandler(out_dir / "run.log", mode="w", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        logger.addHandler(handler)
    logger.addHandler(logging.StreamHandler(sys.stdout))
    return logger


# ----------------------------------------------------------------------------------------------------
# run_lookup
# Purpose (simple): Turn (dataset, query, config) into a printed result plus optional artifacts.
# Inputs: `config_dict`, `data_path`, `location`, `loa_text`, `operation`, optional `out_dir`
# Outputs: (exit code, payload dict) - the payload is also written to `result.json` when `out_dir` is set
# ----------------------------------------------------------------------------------------------------
def run_lookup(
    config_dict: dict,
    data_path: Path,
    location: str,
    loa_text: str,
    operation: str,
    out_dir: Optional[Path] = None,
):
    config = config_from_dict(config_dict)
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)
    logger = _make_logger(out_dir)

    payload = {
        "query": {"location": location, "loa": loa_text, "operation": operation},
        "timestamp_utc": datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
        "git_commit": get_git_commit(ROOT),
        "config_used": config_dict,
    }

    try:
        snapshot = load_dataset_file(data_path, config)
        logger.info("Loaded %d bands for %d locations from %s.",
                    len(snapshot.bands), len(snapshot.locations), snapshot.source)
        payload["dataset"] = {
            "source": snapshot.source,
            "loaded_at": snapshot.loaded_at,
            "band_count": len(snapshot.bands),
            "locations": list(snapshot.locations),
        }
        result = compute_result(snapshot, location, loa_text, operation)
    except (LoadError, ValidationError) as exc:
        logger.error("%s", exc)
        payload["outcome"] = "error"
        payload["error"] = {"kind": type(exc).__name__, "message": str(exc)}
        _write_payload(out_dir, payload, logger)
        return EXIT_ERROR, payload

    display = format_result(result)
    if isinstance(result, NoMatch):
        logger.warning("%s (location=%s, loa=%s)", result.message, location, loa_text)
        payload["outcome"] = "no_match"
        payload["display"] = display
        _write_payload(out_dir, payload, logger)
        return EXIT_NO_MATCH, payload

    logger.info("Tugs required (%s): %s", operation, display["tugs"])
    logger.info("LOA band: %s", display["band"])
    logger.info("Rule: %s", display["rule"])
    logger.info("Notes: %s", display["notes"])

    payload["outcome"] = "match"
    payload["display"] = display
    payload["result"] = {
        "tugs_required": result.tugs_required,
        "raw_tugs": result.raw_tugs,
        "band_label": result.band_label,
        "rule_text": result.rule_text,
        "notes_text": result.notes_text,
        "band": asdict(result.band),
    }
    _write_payload(out_dir, payload, logger)
    return EXIT_OK, payload


def _write_payload(out_dir: Optional[Path], payload: dict, logger: logging.Logger) -> None:
    if out_dir is None:
        return
    result_path = out_dir / "result.json"
    result_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Wrote result to %s", result_path)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        config_dict = _build_config_dict(args)
    except (OSError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_ERROR

    code, _ = run_lookup(
        config_dict,
        data_path=Path(args.data),
        location=args.location,
        loa_text=args.loa,
        operation=args.operation,
        out_dir=Path(args.out) if args.out else None,
    )
    return code


if __name__ == "__main__":
    raise SystemExit(main())
