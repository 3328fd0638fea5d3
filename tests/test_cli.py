import json

import yaml

from breaker_sizing.cli import main


def _write_input(tmp_path, record):
    path = tmp_path / "circuit.yaml"
    path.write_text(yaml.safe_dump(record))
    return path


def test_writes_result_file(tmp_path, scenario1_record, capsys):
    source = _write_input(tmp_path, scenario1_record)
    output = tmp_path / "out" / "result.yaml"

    assert main(["--input", str(source), "--output", str(output)]) == 0

    result = yaml.safe_load(output.read_text(encoding="utf-8"))
    assert result["breaker"]["rating_a"] == 40
    assert "Breaker: 40 A" in capsys.readouterr().out


def test_json_to_stdout(tmp_path, scenario1_record, capsys):
    source = _write_input(tmp_path, scenario1_record)
    assert main(["-i", str(source), "-f", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["breaker"]["standard"] == "NEC"


def test_standard_override(tmp_path, scenario1_record, capsys):
    source = _write_input(tmp_path, scenario1_record)
    assert main(["-i", str(source), "-f", "json", "--standard", "IEC"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["breaker"]["rating_a"] == 32


def test_invalid_input_exit_code(tmp_path, scenario1_record, capsys):
    source = _write_input(tmp_path, dict(scenario1_record, voltage=-10))
    assert main(["-i", str(source)]) == 2
    assert "voltage" in capsys.readouterr().err


def test_missing_input_file(tmp_path, capsys):
    assert main(["-i", str(tmp_path / "missing.yaml")]) == 1
    assert "not found" in capsys.readouterr().err


def test_non_mapping_input(tmp_path):
    source = tmp_path / "circuit.yaml"
    source.write_text("- 1\n- 2\n")
    assert main(["-i", str(source)]) == 1


def test_bad_settings_file(tmp_path, scenario1_record):
    source = _write_input(tmp_path, scenario1_record)
    settings = tmp_path / "settings.yaml"
    settings.write_text("not_a_setting: 3\n")
    assert main(["-i", str(source), "-s", str(settings)]) == 1


def test_run_too_long_exits_with_invalid_input(tmp_path, scenario1_record, capsys):
    record = dict(scenario1_record, cable_run={
        "distance": 7, "distance_unit": "mi", "conductor_size": 300
    })
    assert main(["-i", str(_write_input(tmp_path, record))]) == 2
    assert "cable_run.distance" in capsys.readouterr().err
