import csv
import json

import pytest

from run import main, parse_args, solve_all, write_results_csv


def _read_csv(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def test_solve_single_file(tmp_path, classic_text, capsys):
    path = tmp_path / "puzzles.json"
    path.write_text(json.dumps([{"id": "classic", "puzzle": classic_text}]))

    results = main([str(path)])

    assert results[0]["id"] == "classic"
    assert results[0]["solution"].startswith("534678912")
    assert results[0]["steps"] > 0
    assert "classic,534678912" in capsys.readouterr().out


def test_directory_input_and_csv_output(tmp_path, classic_text):
    for i in range(3):
        (tmp_path / f"puzzle{i}.json").write_text(json.dumps({"id": f"puzzle{i}", "puzzle": classic_text}))
    (tmp_path / "notes.md").write_text("ignored")
    output = tmp_path / "out"
    output.mkdir()
    output_path = output / "results.csv"

    main([str(tmp_path), "--output", str(output_path)])

    rows = _read_csv(output_path)
    assert [r["id"] for r in rows] == ["puzzle0", "puzzle1", "puzzle2"]
    assert all(len(r["solution"]) == 81 for r in rows)


def test_malformed_and_unsolvable_puzzles(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("123\n" + "55" + "0" * 79 + "\n")
    results = main([str(path)])
    assert results[0]["steps"] == -1
    assert results[1]["solution"] == ""


def test_generate_with_seed(tmp_path, capsys):
    output_path = tmp_path / "generated.csv"
    main(["--generate", "2", "--seed", "3", "--cells-to-remove", "40", "--output", str(output_path)])

    rows = _read_csv(output_path)
    assert len(rows) == 2
    for row in rows:
        assert 81 - row["puzzle"].count(".") == 41
        assert "." not in row["solution"]
    assert "------+-------+------" in capsys.readouterr().out


def test_trace_export(tmp_path, classic_text):
    path = tmp_path / "p.txt"
    path.write_text(classic_text + "\n")
    trace_path = tmp_path / "trace.csv"
    main([str(path), "--trace", str(trace_path)])
    rows = _read_csv(trace_path)
    assert rows[-1]["action_type"] == "solution_found"


def test_write_results_csv(tmp_path):
    output_path = tmp_path / "r.csv"
    write_results_csv([{"id": "x", "solution": "", "steps": -1}], output_path)
    assert _read_csv(output_path) == [{"id": "x", "solution": "", "steps": "-1"}]


def test_solve_all_without_tracing(classic_text):
    results = solve_all([{"id": "c", "puzzle": classic_text}], trace_enabled=False)
    assert results[0]["steps"] == 0
    assert len(results[0]["solution"]) == 81


def test_parse_args_requires_input_or_generate():
    with pytest.raises(SystemExit):
        parse_args([])
