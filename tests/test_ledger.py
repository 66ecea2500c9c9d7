import json

import pytest

from worktime_ledger.errors import CorruptLedger, InvalidInput
from worktime_ledger.ledger import (LedgerLayout, LoadStatus, load_ledger, normalize_device_id, persist,
                                    read_ledger, round_hours, upsert)


def test_missing_file_is_empty_ledger(tmp_path):
    result = read_ledger(tmp_path / "worktime.json")
    assert result.status is LoadStatus.MISSING
    assert load_ledger(tmp_path / "worktime.json") == {}


def test_blank_file_is_empty_ledger(tmp_path):
    path = tmp_path / "worktime.json"
    path.write_text("  \n", encoding="utf-8")
    assert read_ledger(path).status is LoadStatus.EMPTY
    assert load_ledger(path) == {}


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "worktime.json"
    path.write_text("{not json", encoding="utf-8")
    result = read_ledger(path)
    assert result.status is LoadStatus.CORRUPT
    assert not result.ok
    with pytest.raises(CorruptLedger):
        load_ledger(path)


def test_undecodable_file_is_corrupt(tmp_path):
    path = tmp_path / "worktime.json"
    path.write_bytes(b'{"2024-01-01": 1, "\xff\xfe": 2}')
    result = read_ledger(path)
    assert result.status is LoadStatus.CORRUPT
    with pytest.raises(CorruptLedger):
        load_ledger(path)


def test_directory_in_place_of_ledger_is_corrupt(tmp_path):
    path = tmp_path / "worktime.json"
    path.mkdir()
    with pytest.raises(CorruptLedger):
        load_ledger(path)


def test_non_object_json_is_corrupt(tmp_path):
    path = tmp_path / "worktime.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(CorruptLedger):
        load_ledger(path)


def test_upsert_sorts_and_does_not_mutate_input():
    ledger = {"2024-01-03": 2}
    updated = upsert(ledger, "2024-01-01", 1.26)
    assert list(updated) == ["2024-01-01", "2024-01-03"]
    assert updated["2024-01-01"] == 1.3
    assert ledger == {"2024-01-03": 2}


def test_upsert_last_write_wins_and_is_idempotent():
    once = upsert({"2024-01-01": 4}, "2024-01-01", 6.5)
    twice = upsert(once, "2024-01-01", 6.5)
    assert once == twice == {"2024-01-01": 6.5}


@pytest.mark.parametrize("hours", [-1, "abc", float("nan"), float("inf"), None, True])
def test_upsert_rejects_invalid_hours(hours):
    with pytest.raises(InvalidInput):
        upsert({}, "2024-01-01", hours)


@pytest.mark.parametrize("hours", [1e308, "1e308", 10 ** 400])
def test_upsert_rejects_hours_too_large_to_round(hours):
    with pytest.raises(InvalidInput):
        upsert({}, "2024-01-01", hours)


def test_upsert_rejects_invalid_date():
    with pytest.raises(InvalidInput):
        upsert({}, "2024/01/01", 3)


def test_upsert_accepts_numeric_string():
    assert upsert({}, "2024-01-01", "7.25") == {"2024-01-01": 7.3}


def test_round_hours_rounds_halves_up():
    assert round_hours(0.25) == 0.3
    assert round_hours(0.04) == 0.0
    assert round_hours(8.0) == 8.0


def test_persist_format(tmp_path):
    path = tmp_path / "data" / "worktime.json"
    persist({"2024-01-02": 2.5, "2024-01-01": 8.0}, path)
    text = path.read_text(encoding="utf-8")
    assert text == '{\n  "2024-01-01": 8,\n  "2024-01-02": 2.5\n}\n'


def test_persist_then_load_round_trip(tmp_path):
    path = tmp_path / "worktime.json"
    ledger = upsert(upsert({}, "2024-05-02", 3.14), "2024-05-01", 7)
    persist(ledger, path)
    assert load_ledger(path) == {"2024-05-01": 7.0, "2024-05-02": 3.1}
    assert list(json.loads(path.read_text(encoding="utf-8"))) == ["2024-05-01", "2024-05-02"]


@pytest.mark.parametrize("raw, expected", [
    ("MacMini", "macmini"),
    ("  Mac Mini!! ", "mac-mini"),
    ("work.laptop_2", "work.laptop_2"),
    ("--host--", "host"),
    (".mac.", "mac"),
    ("_work-laptop._", "work-laptop"),
])
def test_normalize_device_id(raw, expected):
    assert normalize_device_id(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "!!!", "._-", None])
def test_normalize_device_id_rejects_empty(raw):
    with pytest.raises(InvalidInput):
        normalize_device_id(raw)


def test_layout_paths(tmp_path):
    layout = LedgerLayout(tmp_path, "src/data")
    assert layout.canonical_path == tmp_path / "src" / "data" / "worktime.json"
    assert layout.device_path("Mac Mini") == tmp_path / "src" / "data" / "worktime.devices.mac-mini.json"
    assert layout.device_paths() == []

    layout.data_dir.mkdir(parents=True)
    (layout.data_dir / "worktime.devices.b.json").write_text("{}", encoding="utf-8")
    (layout.data_dir / "worktime.devices.a.json").write_text("{}", encoding="utf-8")
    (layout.data_dir / "worktime.json").write_text("{}", encoding="utf-8")
    assert [p.name for p in layout.device_paths()] == ["worktime.devices.a.json", "worktime.devices.b.json"]
