import importlib.util
import json
from pathlib import Path
import pytest

@pytest.fixture(scope="module")
def cli(project_root):
    path = project_root / "scripts" / "map" / "render_map.py"
    spec = importlib.util.spec_from_file_location("render_map", path)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod

def _square(name, lon, lat):
    coords = [[lon, lat], [lon + 0.4, lat], [lon + 0.4, lat + 0.4], [lon, lat + 0.4], [lon, lat]]
    return {"type": "Feature", "properties": {"NAME": name}, "geometry": {"type": "Polygon", "coordinates": [coords]}}

@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    names = ["Adams", "Brown", "Clark", "Dane", "Door", "Iron"]
    rows = ["county,fips,Premature Death,Sparse"]
    for i, n in enumerate(names):
        rows.append(f'{n},5500{i},"{(i + 1) * 1000 + i * i * 37:,}",{"4" if i == 0 else ""}')
    (tmp_path / "table.csv").write_text("\n".join(rows) + "\n", encoding="utf-8")
    fc = {"type": "FeatureCollection", "features": [_square(n, -92 + i * 0.5, 44 + (i % 2) * 0.5) for i, n in enumerate(names)]}
    (tmp_path / "geo.geojson").write_text(json.dumps(fc), encoding="utf-8")
    (tmp_path / "run.toml").write_text(
        '[data]\ntable_path = "table.csv"\ngeo_path = "geo.geojson"\n\n[charts]\noutput_dir = "out"\n',
        encoding="utf-8",
    )
    return tmp_path

def test_render_default_field_with_highlight(cli, workspace: Path, capsys):
    rc = cli.main(["--config", str(workspace / "run.toml"), "--highlight", "0"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Range: 1,000" in out
    assert (workspace / "out" / "map.html").exists()
    assert (workspace / "out" / "chart.html").exists()

def test_list_fields(cli, workspace: Path, capsys):
    assert cli.main(["--config", str(workspace / "run.toml"), "--list-fields"]) == 0
    lines = [ln for ln in capsys.readouterr().out.splitlines() if ln and not ln.startswith("{")]
    assert lines == ["Premature Death", "Sparse"]

def test_insufficient_data_exit_code(cli, workspace: Path, capsys):
    with pytest.warns(UserWarning):
        rc = cli.main(["--config", str(workspace / "run.toml"), "--field", "Sparse"])
    assert rc == 2
    assert "Not enough valid data" in capsys.readouterr().err

def test_highlight_out_of_range(cli, workspace: Path):
    assert cli.main(["--config", str(workspace / "run.toml"), "--highlight", "99"]) == 2

@pytest.mark.parametrize("field, needle", [
    ("Nope", "unknown field"),
    ("fips", "not a mappable numeric field"),
])
def test_bad_field_exit_code(cli, workspace: Path, capsys, field, needle):
    assert cli.main(["--config", str(workspace / "run.toml"), "--field", field]) == 2
    assert needle in capsys.readouterr().err

def test_missing_input_files(cli, tmp_path: Path, capsys):
    cfg = tmp_path / "empty.toml"
    cfg.write_text('[data]\ntable_path = "absent.csv"\n', encoding="utf-8")
    assert cli.main(["--config", str(cfg)]) == 2
    assert "input file not found" in capsys.readouterr().err
