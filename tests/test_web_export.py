import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.web_export.export_dataset_for_web import export, main


def test_export_writes_records_locations_and_plots(tmp_path):
    metadata = export(ROOT / "data" / "tug_requirements.csv", tmp_path)

    bands = json.loads((tmp_path / "bands.json").read_text(encoding="utf-8"))
    locations = json.loads((tmp_path / "locations.json").read_text(encoding="utf-8"))

    assert locations == ["Fairport", "North Jetty", "Oil Terminal"]
    assert bands["row_count"] == len(bands["records"]) == 8
    second = bands["records"][1]
    assert second["berthing_tugs"] == 1.5
    assert second["berthing_tugs_required"] == 2
    assert second["band_label"] == "100–149.99 m"

    assert metadata["cache_name"] == "mmp-mintug-static-v6"
    assert len(metadata["plots"]) == 3
    for name in metadata["plots"]:
        assert (tmp_path / "plots" / name).exists()


def test_export_cli_reports_load_errors(tmp_path, capsys):
    code = main(["--data", str(tmp_path / "missing.csv"), "--out", str(tmp_path / "out")])
    assert code == 2
    assert "Failed to read CSV" in capsys.readouterr().err
