"""Tests for the command line front end and the map helpers."""

from pathlib import Path
from unittest import mock

import pytest

from location_models import Coordinate, LocationRecord, RankedRecord
from main import main
from map_visualization import create_results_map, map_link, save_and_open_map


class TestCli:
    def test_nearest_hospital(self, capsys):
        assert main(["--lat", "12.9635", "--lon", "77.5737"]) == 0
        out = capsys.readouterr().out
        assert "1. Victoria Hospital" in out
        assert "Distance: 0.00 km" in out
        assert "https://www.google.com/maps?q=12.9635,77.5737&z=15" in out

    def test_blood_banks_default_to_three(self, capsys):
        assert main(["--profile", "bloodbank", "--lat", "12.9575", "--lon", "77.5640"]) == 0
        out = capsys.readouterr().out
        assert "3. " in out
        assert "4. " not in out

    def test_custom_data_and_k(self, capsys, simple_csv: Path):
        csv = simple_csv.parent / "custom.csv"
        csv.write_text("name,latitude,longitude\nA,12.97,77.59\nB,13.0,77.6\n", encoding="utf-8")
        assert main(["--profile", "locations", "--data", str(csv), "-k", "2", "--lat", "13.0", "--lon", "77.6"]) == 0
        out = capsys.readouterr().out
        assert out.index("1. B") < out.index("2. A")

    def test_missing_dataset_reports_error(self, capsys, tmp_path: Path):
        assert main(["--data", str(tmp_path / "none.csv"), "--lat", "1", "--lon", "2"]) == 1
        assert "none.csv" in capsys.readouterr().out

    def test_lat_without_lon(self):
        with pytest.raises(SystemExit):
            main(["--lat", "1"])

    def test_address_lookup(self, capsys):
        hit = {"display_name": "Fort Road", "lat": 12.9635, "lon": 77.5737}
        with mock.patch("geo_position.geocode_address", return_value=hit):
            assert main(["--address", "Fort Road, Bengaluru"]) == 0
        assert "Victoria Hospital" in capsys.readouterr().out

    def test_writes_map(self, capsys, tmp_path: Path):
        target = tmp_path / "map.html"
        with mock.patch("map_visualization.webbrowser.open") as opener:
            assert main(["--lat", "12.97", "--lon", "77.59", "--map", str(target), "--no-browser"]) == 0
        assert target.is_file()
        opener.assert_not_called()


class TestMapVisualization:
    def test_map_link(self):
        assert map_link(Coordinate(12.97, 77.59)) == "https://www.google.com/maps?q=12.97,77.59&z=15"

    def test_results_map_contains_markers(self, tmp_path: Path):
        record = LocationRecord(Coordinate(12.98, 77.6), {"name": "Clinic", "address": "Main St"})
        results_map = create_results_map(Coordinate(12.97, 77.59), [RankedRecord(record, 1.2)])
        path = save_and_open_map(results_map, str(tmp_path / "m.html"), open_browser=False)
        html = Path(path).read_text(encoding="utf-8")
        assert "Clinic" in html
        assert "You are here" in html
