# blockqsim/tests/test_cli.py
import json
import os
from blockqsim import bench, cli, plot_results
from blockqsim.circuit import Circuit

def test_presets_listing(capsys):
    assert cli.main(["presets"]) == 0
    out = capsys.readouterr().out
    assert "bell" in out and "Grover's alg." in out

def test_preset_bell_output(capsys, tmp_path):
    save = tmp_path / "bell.json"
    assert cli.main(["preset", "bell", "--save", str(save)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["A: P(1) ≈ 0.500*", "B: P(1) ≈ 0.500*"]
    assert json.loads(save.read_text())["ch"] == 2

def test_run_document(capsys, tmp_path):
    path = tmp_path / "x.json"
    path.write_text(json.dumps({"ch": 2, "iv": [[[0, 0], [1, 0]]],
                                "bl": [{"type": "gate", "gate": "cx", "binds": [1, 0]}]}))
    assert cli.main(["run", str(path)]) == 0
    assert capsys.readouterr().out.splitlines() == ["A: P(1) ≈ 1.000", "B: P(1) ≈ 1.000"]

def test_run_invalid_program(capsys, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"ch": 2, "bl": [{"type": "repeat-end", "count": 1}]}))
    assert cli.main(["run", str(path)]) == 1
    assert capsys.readouterr().out.splitlines() == ["A: Error?", "B: Error?"]

def test_run_unreadable_document(capsys, tmp_path):
    assert cli.main(["run", str(tmp_path / "missing.json")]) == 2
    assert "cannot load" in capsys.readouterr().err

def test_format_values_marks_entanglement():
    c = Circuit.empty(3).h(0).cx(1, 0)
    assert cli.format_values(c, c.run()) == ["A: P(1) ≈ 0.500*", "B: P(1) ≈ 0.500*", "C: P(1) ≈ 0.000"]

# ---------------------------------------------------------------------

def test_random_circuit_shape():
    c = bench.random_circuit(4, 6, seed=1)
    assert c.channels == 4
    # 3 single-channel layers of 4 gates + 3 multi-channel layers of 1 gate
    assert len(c.blocks) == 15
    assert len(c.run()) == 4

def test_bench_and_plot(tmp_path, capsys):
    out = tmp_path / "serial" / "channels.csv"
    bench.bench_channels([2, 3, 4], 4, "serial", str(out))
    rows = plot_results.load_rows(str(out))
    assert [r["channels"] for r in rows] == [2, 3, 4]
    assert all(r["backend"] == "serial" and r["wall_ms"] >= 0 for r in rows)
    written = plot_results.plot_all(str(tmp_path))
    assert any(p.endswith("runtime_vs_channels_serial.png") for p in written)
    assert all(os.path.exists(p) for p in written)

def test_run_non_utf8_document(capsys, tmp_path):
    path = tmp_path / "binary.json"
    path.write_bytes(b"\xff\xfe{")
    assert cli.main(["run", str(path)]) == 2
    assert "cannot load" in capsys.readouterr().err
