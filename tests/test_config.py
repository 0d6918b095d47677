from __future__ import annotations

import json
import pathlib

import pytest

from leaveplan.config import PlannerConfig, load_config, merge_holidays, normalize_holidays
from leaveplan.errors import ConfigError
from leaveplan.holidays import Holiday


def _write(tmp_path: pathlib.Path, data: object) -> pathlib.Path:
    path = tmp_path / "planner.json"
    path.write_text(json.dumps(data))
    return path


class TestNormalizeHolidays:
    def test_mixed_entries(self) -> None:
        result = normalize_holidays(
            [
                {"date": "2026-05-01", "name": "  Labour Day ", "enabled": False, "id": "x1"},
                "2026-01-26",
                {"date": "2026-03-04"},
            ],
            2026,
        )
        assert [h.date for h in result] == ["2026-01-26", "2026-03-04", "2026-05-01"]
        assert result[0].name == "Holiday"
        assert result[0].enabled is True
        assert result[2] == Holiday("x1", "2026-05-01", "Labour Day", False)

    def test_drops_bad_entries(self) -> None:
        result = normalize_holidays(
            [
                42,
                None,
                ["2026-01-01"],
                {"name": "no date"},
                {"date": "2026-02-30"},
                {"date": "2025-12-25"},
                {"date": 20260101},
                "not-a-date",
            ],
            2026,
        )
        assert result == []

    def test_non_bool_enabled_means_enabled(self) -> None:
        (h,) = normalize_holidays([{"date": "2026-01-26", "enabled": "no"}], 2026)
        assert h.enabled is True

    def test_missing_id_generated(self) -> None:
        a, b = normalize_holidays(["2026-01-26", "2026-01-27"], 2026)
        assert a.id and b.id and a.id != b.id


class TestMergeHolidays:
    def test_overrides_win_by_date(self) -> None:
        base = [Holiday("a", "2026-01-26", "Republic Day"), Holiday("b", "2026-05-01", "May")]
        overrides = [Holiday("c", "2026-01-26", "Renamed", False), Holiday("d", "2026-02-02", "X")]
        merged = merge_holidays(base, overrides)
        assert [h.id for h in merged] == ["c", "d", "b"]


class TestLoadConfig:
    def test_full_file(self, tmp_path: pathlib.Path) -> None:
        path = _write(
            tmp_path,
            {
                "year": 2026,
                "leaves": 12,
                "min_gap_weeks": 2,
                "max_block_length": 6,
                "holidays": [{"date": "2026-03-17", "name": "Company day"}, "2026-12-24"],
            },
        )
        cfg = load_config(path)
        assert isinstance(cfg, PlannerConfig)
        assert cfg.year == 2026
        assert cfg.leaves == 12
        assert cfg.min_gap_weeks == 2
        assert cfg.max_block_length == 6
        assert cfg.country is None
        assert [h.date for h in cfg.holidays] == ["2026-03-17", "2026-12-24"]

    def test_defaults(self, tmp_path: pathlib.Path) -> None:
        cfg = load_config(_write(tmp_path, {}), year=2026)
        assert cfg.leaves is None
        assert cfg.min_gap_weeks == 3
        assert cfg.max_block_length == 10
        assert cfg.holidays == []

    def test_year_argument_overrides_file(self, tmp_path: pathlib.Path) -> None:
        path = _write(tmp_path, {"year": 2026, "holidays": ["2026-01-26", "2027-01-26"]})
        cfg = load_config(path, year=2027)
        assert cfg.year == 2027
        assert [h.date for h in cfg.holidays] == ["2027-01-26"]

    def test_gap_clamped(self, tmp_path: pathlib.Path) -> None:
        assert load_config(_write(tmp_path, {"min_gap_weeks": 20}), 2026).min_gap_weeks == 8
        assert load_config(_write(tmp_path, {"min_gap_weeks": 0}), 2026).min_gap_weeks == 1

    def test_leaves_as_string(self, tmp_path: pathlib.Path) -> None:
        assert load_config(_write(tmp_path, {"leaves": "15"}), 2026).leaves == 15

    def test_country_preset_merged_under_explicit(self, tmp_path: pathlib.Path) -> None:
        path = _write(
            tmp_path,
            {
                "year": 2026,
                "country": "in",
                "holidays": [{"date": "2026-01-26", "name": "Renamed", "enabled": False}],
            },
        )
        cfg = load_config(path)
        assert len(cfg.holidays) == 12
        republic = next(h for h in cfg.holidays if h.date == "2026-01-26")
        assert republic.name == "Renamed"
        assert republic.enabled is False

    def test_country_none(self, tmp_path: pathlib.Path) -> None:
        cfg = load_config(_write(tmp_path, {"country": "none"}), 2026)
        assert cfg.holidays == []

    def test_dropped_entries_logged(
        self, tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = _write(tmp_path, {"holidays": ["2026-01-26", "2025-01-01", "garbage"]})
        with caplog.at_level("WARNING", logger="leaveplan"):
            cfg = load_config(path, 2026)
        assert len(cfg.holidays) == 1
        assert "Dropped 2 holiday entries" in caplog.text


class TestLoadConfigErrors:
    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(path)

    def test_not_an_object(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError, match="must contain a JSON object"):
            load_config(_write(tmp_path, ["2026-01-01"]))

    def test_bad_leaves(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError, match="Invalid 'leaves': Paid leaves cannot be negative"):
            load_config(_write(tmp_path, {"leaves": -1}), 2026)

    def test_too_many_leaves(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError, match="cannot exceed 200"):
            load_config(_write(tmp_path, {"leaves": 365}), 2026)

    def test_bad_year(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError, match="'year' must be an integer"):
            load_config(_write(tmp_path, {"year": "next"}))

    def test_holidays_not_a_list(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError, match="'holidays' must be a list"):
            load_config(_write(tmp_path, {"holidays": "2026-01-01"}), 2026)

    def test_country_not_a_string(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError, match="'country' must be a string"):
            load_config(_write(tmp_path, {"country": 7}), 2026)

    def test_unknown_country(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError, match="Unknown country preset"):
            load_config(_write(tmp_path, {"country": "xx"}), 2026)
