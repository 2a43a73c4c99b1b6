import json

import pytest

from pedigree_py import cli


@pytest.fixture
def data_dir(tmp_path):
    dogs = {
        "dogs": [
            {"id": "F", "name": "Champion Duke", "sex": "Male"},
            {"id": "M", "name": "Lady Grace", "sex": "Female"},
            {"id": "S", "name": "Max", "sex": "Male", "sireId": "F", "damId": "M"},
            {"id": "D", "name": "Bella", "sex": "Female", "sireId": "F", "damId": "M"},
            {"id": "PUP", "name": "Pup", "sireId": "S", "damId": "D"},
        ]
    }
    src = tmp_path / "dogs.json"
    src.write_text(json.dumps(dogs))
    d = tmp_path / "db"
    assert cli.main(["--data-dir", str(d), "import", str(src)]) == 0
    return d


def test_analyze_prints_report(data_dir, capsys):
    assert cli.main(["--data-dir", str(data_dir), "analyze", "S", "D", "-g", "3"]) == 0
    out = capsys.readouterr().out
    assert "25.00%" in out
    assert "Very High risk" in out
    assert "Champion Duke [F]" in out
    assert "Sire → Sire → (common ancestor) / Dam → Sire → (common ancestor)" in out


def test_analyze_json(data_dir, capsys):
    assert cli.main(["--data-dir", str(data_dir), "analyze", "S", "D", "--json"]) == 0
    body = json.loads(capsys.readouterr().out)
    assert body["inbreedingCoefficient"] == 0.25
    assert body["generations"] == 6


def test_coi_of_recorded_dog(data_dir, capsys):
    assert cli.main(["--data-dir", str(data_dir), "coi", "PUP"]) == 0
    out = capsys.readouterr().out
    assert "Inbreeding analysis for Pup (PUP)" in out
    assert "25.00%" in out


def test_pedigree_and_influence(data_dir, capsys):
    assert cli.main(["--data-dir", str(data_dir), "pedigree", "PUP", "-g", "2"]) == 0
    out = capsys.readouterr().out
    assert "Pup [PUP]" in out
    assert "Sire: Max [S]" in out
    assert "Dam: Lady Grace [M]" in out

    assert cli.main(["--data-dir", str(data_dir), "influence", "PUP", "-g", "2"]) == 0
    out = capsys.readouterr().out
    assert "50.000%  Champion Duke [F]" in out


def test_export_round_trip(data_dir, tmp_path):
    out = tmp_path / "out.json"
    assert cli.main(["--data-dir", str(data_dir), "export", str(out)]) == 0
    ids = sorted(d["id"] for d in json.loads(out.read_text())["dogs"])
    assert ids == ["D", "F", "M", "PUP", "S"]


def test_error_exit_codes(data_dir, capsys):
    assert cli.main(["--data-dir", str(data_dir), "analyze", "S", "D", "-g", "0"]) == 2
    assert cli.main(["--data-dir", str(data_dir), "analyze", "S", "S"]) == 2
    assert cli.main(["--data-dir", str(data_dir), "analyze", "S", "nobody"]) == 1
    assert cli.main(["--data-dir", str(data_dir), "pedigree", "nobody"]) == 1
    assert "error:" in capsys.readouterr().err


def test_no_command_prints_help():
    assert cli.main([]) == 1


def test_missing_import_file(tmp_path):
    assert cli.main(["--data-dir", str(tmp_path), "import", str(tmp_path / "none.json")]) == 1


@pytest.mark.parametrize("content", ["{not json", '["F", "M"]', '"just a string"', '{"dogs": 5}'])
def test_import_rejects_malformed_input(tmp_path, capsys, content):
    src = tmp_path / "bad.json"
    src.write_text(content)
    assert cli.main(["--data-dir", str(tmp_path / "db"), "import", str(src)]) == 2
    assert "error:" in capsys.readouterr().err


def test_invalid_threshold_config_exits_with_error(tmp_path, capsys):
    cfgfile = tmp_path / "cfg.json"
    cfgfile.write_text(json.dumps({"moderate_threshold": 0.3}))
    assert cli.main(["--config", str(cfgfile), "--data-dir", str(tmp_path), "analyze", "S", "D"]) == 2
    assert "thresholds" in capsys.readouterr().err
