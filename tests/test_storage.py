from __future__ import annotations

import json

import pytest
from conftest import make_dataset, make_eclipse, year_record

from cosmicbirthday.models import Dataset
from cosmicbirthday.storage import (
    MASTER_FILE,
    DatasetError,
    eclipse_file,
    find_dataset,
    load_dataset,
    moon_file,
    read_checkpoint,
    write_json,
)


def _sample() -> Dataset:
    return make_dataset(
        moon_phases={2024: year_record(2024, [(4, 8, "New Moon")])},
        solar_eclipses=(make_eclipse(),),
    )


def test_master_file_round_trip(tmp_path):
    original = _sample()
    write_json(tmp_path / MASTER_FILE, original.to_dict())

    loaded = load_dataset(tmp_path / MASTER_FILE)

    assert loaded == original


def test_written_json_uses_camel_case_keys(tmp_path):
    path = write_json(tmp_path / "nested" / "out.json", _sample().to_dict())
    data = json.loads(path.read_text())
    assert set(data) == {"metadata", "moonPhases", "solarEclipses", "lunarEclipses"}
    assert data["moonPhases"]["2024"]["count"] == 1
    assert data["solarEclipses"][0]["date"] == "2024-04-08"


def test_find_prefers_master(tmp_path):
    write_json(tmp_path / MASTER_FILE, _sample().to_dict())
    write_json(tmp_path / moon_file(1960, 2100), {"metadata": {"title": "moon"}, "moonPhases": {}})

    assert find_dataset(tmp_path, 1960, 2100).solar_eclipses


def test_find_combines_split_files(tmp_path):
    sample = _sample().to_dict()
    write_json(
        tmp_path / moon_file(1960, 2100),
        {"metadata": {"source": "USNO"}, "moonPhases": sample["moonPhases"]},
    )
    write_json(
        tmp_path / eclipse_file(1960, 2100),
        {"metadata": {"sources": ["NASA"]}, "solarEclipses": sample["solarEclipses"], "lunarEclipses": []},
    )

    dataset = find_dataset(tmp_path, 1960, 2100)

    assert list(dataset.moon_phases) == [2024]
    assert len(dataset.solar_eclipses) == 1
    assert dataset.metadata["source"] == "USNO"
    assert dataset.metadata["totalSolarEclipses"] == 1


def test_find_moon_file_alone(tmp_path):
    write_json(
        tmp_path / moon_file(1960, 2100),
        {"metadata": {}, "moonPhases": _sample().to_dict()["moonPhases"]},
    )
    dataset = find_dataset(tmp_path, 1960, 2100)
    assert dataset.solar_eclipses == ()
    assert dataset.total_phases == 1


def test_find_nothing(tmp_path):
    with pytest.raises(DatasetError, match="No cosmic dataset"):
        find_dataset(tmp_path, 1960, 2100)


def test_load_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(DatasetError, match="Invalid JSON"):
        load_dataset(path)


def test_load_non_object(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]")
    with pytest.raises(DatasetError):
        load_dataset(path)


def test_checkpoint_missing_or_corrupt_is_none(tmp_path):
    assert read_checkpoint(tmp_path / "absent.json") is None
    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{")
    assert read_checkpoint(corrupt) is None
