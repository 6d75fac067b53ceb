import json
from copy import deepcopy
from pathlib import Path

import pytest

from swishfit.core.errors import ConfigurationError
from swishfit.training import pipelines


def _identity_config(run_dir, max_epochs=40):
    config = deepcopy(dict(pipelines.load_preset("identity-min")))
    config["train"] = dict(config["train"], run_dir=str(run_dir))
    config["train"]["stopping"] = {"max_epochs": max_epochs, "run_max_epochs": None}
    return config


def test_presets_include_builtin_and_file_presets():
    names = set(pipelines.presets())
    assert {"complex-wave", "identity-min", "sine-small", "complex-wave-short"} <= names
    with pytest.raises(ConfigurationError):
        pipelines.load_preset("does-not-exist")


def test_run_pipeline_writes_artifacts(tmp_path, capsys):
    result = pipelines.run_pipeline(_identity_config(tmp_path / "run"))

    assert result.epochs == 40
    assert result.status == "exhausted"
    assert "=== swishfit run ===" in capsys.readouterr().out

    run_dir = tmp_path / "run"
    for name in (
        "metrics.jsonl",
        "metrics.csv",
        "manifest.json",
        "summary.json",
        "config.json",
        "approximation.csv",
    ):
        assert (run_dir / name).exists(), name

    lines = Path(result.metrics_path).read_text().splitlines()
    assert len(lines) == 40
    assert json.loads(lines[-1])["loss"] == pytest.approx(result.final_loss)

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["outcome"]["status"] == "exhausted"
    assert manifest["outcome"]["epochs"] == 40
    assert manifest["dataset"]["type"] == "identity"

    curve_rows = Path(result.approximation_path).read_text().splitlines()
    assert curve_rows[0] == "x,y_target,y_approx"
    assert len(curve_rows) == 4


def test_run_pipeline_rejects_topology_that_does_not_fit(tmp_path):
    config = _identity_config(tmp_path / "bad")
    config["model"] = {"layers": [2, 4, 1]}
    with pytest.raises(ConfigurationError):
        pipelines.run_pipeline(config)


def test_run_pipeline_requires_all_sections():
    with pytest.raises(ConfigurationError):
        pipelines.run_pipeline({"data": {"name": "identity"}})


def test_read_config_file_formats(tmp_path):
    json_path = tmp_path / "override.json"
    json_path.write_text(json.dumps({"train": {"seed": 5}}))
    assert pipelines.read_config_file(json_path) == {"train": {"seed": 5}}

    with pytest.raises(ConfigurationError):
        pipelines.read_config_file(tmp_path / "override.toml")

    pytest.importorskip("yaml")
    yaml_path = tmp_path / "override.yaml"
    yaml_path.write_text("train:\n  learning_rate: 0.01\n")
    assert pipelines.read_config_file(yaml_path) == {"train": {"learning_rate": 0.01}}
