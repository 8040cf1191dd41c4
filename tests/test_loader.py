import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.offline.http import Response
from src.tugs import (
    LoadError,
    ParseError,
    bands_to_dataframe,
    get_config,
    load_dataset,
    load_dataset_file,
    parse,
    parse_number,
)
from src.tugs.aliases import normalize_header, resolve_columns

HEADER = "Location,Min Length M,Max Length M,Berthing Tugs No,Unberthing Tugs No"


def test_parse_round_trip_minimal_table():
    bands = parse(f"{HEADER}\nFairport,50,100,2,1\n")
    assert len(bands) == 1
    band = bands[0]
    assert band.location == "Fairport"
    assert (band.min_length_m, band.max_length_m) == (50.0, 100.0)
    assert (band.berthing_tugs, band.unberthing_tugs) == (2.0, 1.0)
    assert band.berthing_rule == ""
    assert band.unberthing_rule == ""
    assert band.additional_notes == ""


def test_normalize_header_folds_case_space_hyphen_and_punctuation():
    assert normalize_header("Min Loa (m)") == "min_loa_m"
    assert normalize_header("  Berthing-Tugs   No ") == "berthing_tugs_no"
    assert normalize_header("Additional Notes") == "additional_notes"
    assert normalize_header(None) == ""


def test_min_loa_header_resolves_to_min_length_column():
    indices = resolve_columns(["Port", "Min Loa (m)", "Max LOA (m)", "Berthing", "Unberthing", "Remarks"])
    assert indices["location"] == 0
    assert indices["min_length_m"] == 1
    assert indices["max_length_m"] == 2
    assert indices["berthing_tugs"] == 3
    assert indices["unberthing_tugs"] == 4
    assert indices["additional_notes"] == 5
    assert indices["berthing_rule"] == -1


def test_alias_order_prefers_earlier_alias():
    # "berthing_tugs_no" outranks the bare "berthing" heading wherever it sits.
    indices = resolve_columns(["Location", "Berthing", "Berthing Tugs No"])
    assert indices["berthing_tugs"] == 2


def test_parse_reads_optional_columns_by_alias():
    text = (
        "Harbour,LOA Min,LOA Max,Tugs Berthing,Rule Berthing,Tugs Unberthing,Rule Unberthing,Notes\n"
        'East Quay,0,80,1,"One tug, bow",1,One tug,"Note with ""quotes"""\n'
    )
    band = parse(text)[0]
    assert band.location == "East Quay"
    assert band.berthing_rule == "One tug, bow"
    assert band.unberthing_rule == "One tug"
    assert band.additional_notes == 'Note with "quotes"'


def test_parse_rejects_too_few_rows():
    with pytest.raises(ParseError, match="empty or unreadable"):
        parse(f"{HEADER}\n")
    with pytest.raises(ParseError):
        parse("")


def test_parse_rejects_unrecognised_headers():
    with pytest.raises(ParseError, match="headers not recognised"):
        parse("Location,Min,Max,Berthing,Unberthing\nFairport,50,100,2,1\n")


def test_parse_skips_placeholder_rows_and_empty_locations():
    text = f"{HEADER}\n...\n,,,,\n,50,100,2,1\nFairport,50,100,2,1\n"
    bands = parse(text)
    assert [b.location for b in bands] == ["Fairport"]


def test_unparseable_numbers_default_to_zero():
    bands = parse(f"{HEADER}\nFairport,abc,100,two,1.5\n")
    band = bands[0]
    assert band.min_length_m == 0.0
    assert band.berthing_tugs == 0.0
    assert band.unberthing_tugs == 1.5


def test_strict_lengths_discards_rows_with_bad_bounds():
    text = f"{HEADER}\nFairport,abc,100,2,1\nFairport,100,200,3,2\n"
    bands = parse(text, strict_lengths=True)
    assert [(b.min_length_m, b.max_length_m) for b in bands] == [(100.0, 200.0)]


def test_short_rows_read_missing_cells_as_empty():
    bands = parse(f"{HEADER}\nFairport,50,100\n")
    assert bands[0].berthing_tugs == 0.0
    assert bands[0].unberthing_tugs == 0.0


def test_parse_number_is_locale_neutral_and_finite_only():
    assert parse_number(" 12.5 ") == 12.5
    assert parse_number("1e2") == 100.0
    assert parse_number(".5") == 0.5
    assert parse_number("-3") == -3.0
    assert parse_number("12,5") is None
    assert parse_number("12m") is None
    assert parse_number("inf") is None
    assert parse_number("nan") is None
    assert parse_number("1_000") is None
    assert parse_number("") is None
    assert parse_number(None) is None
    assert parse_number(7) == 7.0


def test_locations_are_distinct_and_sorted(tmp_path):
    csv_path = tmp_path / "tug_requirements.csv"
    csv_path.write_text(
        f"{HEADER}\nzeta,0,10,1,1\nAlpha,0,10,1,1\nbeta,0,10,1,1\nAlpha,10,20,2,2\n",
        encoding="utf-8",
    )
    snapshot = load_dataset_file(csv_path)
    assert snapshot.locations == ("Alpha", "beta", "zeta")
    assert len(snapshot.bands) == 4
    assert snapshot.source.endswith("tug_requirements.csv")


def test_load_dataset_file_wraps_errors(tmp_path):
    with pytest.raises(LoadError, match="Failed to read CSV"):
        load_dataset_file(tmp_path / "missing.csv")

    bad = tmp_path / "bad.csv"
    bad.write_text("Location,Min\n", encoding="utf-8")
    with pytest.raises(LoadError, match="empty or unreadable"):
        load_dataset_file(bad)


def test_load_dataset_file_reads_shipped_sample():
    snapshot = load_dataset_file(ROOT / "data" / "tug_requirements.csv")
    assert "Fairport" in snapshot.locations
    assert "Oil Terminal" in snapshot.locations
    assert all(b.location for b in snapshot.bands)


def test_bands_to_dataframe_keeps_table_order(sample_csv):
    df = bands_to_dataframe(parse(sample_csv))
    assert df["location"].tolist() == ["Fairport", "Fairport", "North Jetty"]
    assert df.columns[0] == "location"
    assert bands_to_dataframe([]).empty


@pytest.mark.asyncio
async def test_load_dataset_fetches_with_no_cache(network, config):
    snapshot = await load_dataset(network, config)
    assert snapshot.locations == ("Fairport", "North Jetty")
    assert network.calls == [(config.base_url + "tug_requirements.csv", "no-cache")]


@pytest.mark.asyncio
async def test_load_dataset_reports_http_status(config):
    async def not_found(request, cache_mode=None):
        return Response(status=404, url=request.url)

    with pytest.raises(LoadError, match=r"HTTP 404"):
        await load_dataset(not_found, config)


@pytest.mark.asyncio
async def test_load_dataset_reports_network_failure(network, config):
    network.online = False
    with pytest.raises(LoadError, match="Failed to load CSV"):
        await load_dataset(network, get_config("default"))


@pytest.mark.asyncio
async def test_load_dataset_replaces_undecodable_bytes(config):
    body = f"{HEADER}\nF\xe9rport,50,100,2,1\n".encode("latin-1")

    async def latin1(request, cache_mode=None):
        return Response(status=200, body=body, url=request.url)

    snapshot = await load_dataset(latin1, config)
    assert snapshot.locations == ("F\ufffdrport",)
    assert snapshot.bands[0].berthing_tugs == 2.0
