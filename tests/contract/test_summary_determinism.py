import json
from copy import deepcopy
from pathlib import Path

from swishfit.training import pipelines


def _run(run_dir):
    config = deepcopy(dict(pipelines.load_preset("sine-small")))
    config["train"] = dict(config["train"], run_dir=str(run_dir))
    config["train"]["stopping"] = {"max_epochs": 12, "run_max_epochs": None}
    return pipelines.run_pipeline(config)


def test_seeded_runs_produce_identical_logs(tmp_path):
    first = _run(tmp_path / "a")
    second = _run(tmp_path / "b")

    assert first.final_loss == second.final_loss
    assert Path(first.metrics_path).read_text() == Path(second.metrics_path).read_text()
    assert Path(first.summary_path).read_text() == Path(second.summary_path).read_text()
    assert (
        Path(first.approximation_path).read_text() == Path(second.approximation_path).read_text()
    )

    summary = json.loads(Path(first.summary_path).read_text())
    assert summary["records"] == 12
    assert summary["metrics"]["loss"]["last"] == first.final_loss
