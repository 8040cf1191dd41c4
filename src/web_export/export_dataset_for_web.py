import argparse
import json
import re
import sys
from datetime import datetime, timezone
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


ROOT = Path(__file__).resolve().parents[2]
DATA_PATH = ROOT / "data" / "tug_requirements.csv"
OUTPUT_DIR = ROOT / "outputs" / "web"

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.tugs import (  # noqa: E402
    BERTHING,
    UNBERTHING,
    LoadError,
    bands_to_dataframe,
    format_band_label,
    get_config,
    load_dataset_file,
    round_up_tugs,
)

UNITS = {
    "location": "category",
    "min_length_m": "metres",
    "max_length_m": "metres",
    "berthing_tugs": "tugs (raw)",
    "berthing_tugs_required": "tugs",
    "berthing_rule": "text",
    "unberthing_tugs": "tugs (raw)",
    "unberthing_tugs_required": "tugs",
    "unberthing_rule": "text",
    "additional_notes": "text",
    "band_label": "text",
}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Export the parsed tug dataset for the web shell.")
    parser.add_argument("--data", default=str(DATA_PATH), help="Path to tug_requirements.csv.")
    parser.add_argument("--out", default=str(OUTPUT_DIR), help="Output directory.")
    parser.add_argument("--profile", default="default", help="Config profile (default/strict).")
    parser.add_argument("--no-plots", action="store_true", help="Skip the per-location plots.")
    return parser.parse_args(argv)


def _slug(text):
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_") or "location"


def build_frame(bands):
    """Bands plus the rounded tug counts and display label, in table order."""
    df = bands_to_dataframe(bands)
    if df.empty:
        return df
    df["berthing_tugs_required"] = df["berthing_tugs"].map(round_up_tugs)
    df["unberthing_tugs_required"] = df["unberthing_tugs"].map(round_up_tugs)
    df["band_label"] = [format_band_label(band) for band in bands]
    return df


def _to_records(df):
    """Convert a dataframe to JSON-ready records."""
    if df.empty:
        return []
    return json.loads(df.to_json(orient="records", force_ascii=False))


def plot_location(df, location, out_path):
    """Step plot of rounded tugs vs LOA for one location; False when there is nothing to draw."""
    subset = df[df["location"] == location]
    if subset.empty:
        return False
    plt.figure(figsize=(10, 5))
    for operation, column, color in (
        (BERTHING, "berthing_tugs_required", "tab:blue"),
        (UNBERTHING, "unberthing_tugs_required", "tab:orange"),
    ):
        for _, row in subset.iterrows():
            plt.hlines(row[column], row["min_length_m"], row["max_length_m"], linewidth=3, color=color)
        plt.plot([], [], color=color, linewidth=3, label=operation.capitalize())
    plt.title(f"Tugs required by LOA - {location}")
    plt.xlabel("LOA (m)")
    plt.ylabel("Tugs")
    plt.legend()
    plt.tight_layout()
    plt.savefig(out_path, dpi=150)
    plt.close()
    return True


def export(data_path, out_dir, profile="default", plots=True):
    config = get_config(profile)
    snapshot = load_dataset_file(data_path, config)
    df = build_frame(snapshot.bands)

    out_dir.mkdir(parents=True, exist_ok=True)
    exported_at = datetime.now(timezone.utc).replace(microsecond=0).isoformat()

    bands_payload = {
        "source": snapshot.source,
        "exported_at": exported_at,
        "row_count": len(df),
        "columns": df.columns.tolist(),
        "records": _to_records(df),
    }
    (out_dir / "bands.json").write_text(
        json.dumps(bands_payload, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    (out_dir / "locations.json").write_text(
        json.dumps(list(snapshot.locations), indent=2, ensure_ascii=False), encoding="utf-8"
    )

    plot_files = []
    if plots and not df.empty:
        plots_dir = out_dir / "plots"
        plots_dir.mkdir(parents=True, exist_ok=True)
        for location in snapshot.locations:
            out_path = plots_dir / f"{_slug(location)}_tugs.png"
            if plot_location(df, location, out_path):
                plot_files.append(out_path.name)

    metadata = {
        "exported_at": exported_at,
        "loaded_at": snapshot.loaded_at,
        "source": snapshot.source,
        "row_count": len(df),
        "config_profile": config.name,
        "cache_name": config.cache_name,
        "locations": list(snapshot.locations),
        "plots": plot_files,
        "columns": {col: {"unit": UNITS.get(col, "unitless")} for col in df.columns},
    }
    (out_dir / "metadata.json").write_text(
        json.dumps(metadata, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    return metadata


def main(argv=None):
    args = parse_args(argv)
    out_dir = Path(args.out)
    try:
        metadata = export(Path(args.data), out_dir, profile=args.profile, plots=not args.no_plots)
    except LoadError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print(f"Wrote outputs to {out_dir}")
    print(f"Locations: {', '.join(metadata['locations'])}")
    print(f"Bands rows: {metadata['row_count']}")
    print(f"Bands columns: {len(metadata['columns'])}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
