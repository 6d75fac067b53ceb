import csv
import json
import math
from pathlib import Path

import pytest

from swishfit.core.types import ApproximationPoint
from swishfit.data import available_datasets, get_dataset
from swishfit.data.samplers import complex_wave, complex_wave_points
from swishfit.reporting.artifacts import write_approximation, write_manifest
from swishfit.reporting.metrics import CsvSink, JsonlSink
from swishfit.reporting.plots import PlotAdapter
from swishfit.reporting.summary import compute_auc, write_summary
from swishfit.training.metrics import curve_metrics


def test_builtin_datasets_registered():
    assert {"complex_wave", "identity", "sine"} <= set(available_datasets())
    with pytest.raises(KeyError):
        get_dataset("mnist")


def test_complex_wave_sampling_layout():
    xs = complex_wave_points()
    assert len(xs) == 60
    extend = 0.1 * math.pi
    assert xs[0] == pytest.approx(-math.pi - extend)
    assert xs[39] == pytest.approx(math.pi + extend)
    assert all(-math.pi - extend <= x <= -math.pi - extend + 0.4 * math.pi for x in xs[40:50])
    assert all(0.6 * math.pi <= x <= math.pi + extend for x in xs[50:])

    spec = get_dataset("complex_wave")
    assert len(spec) == 60
    assert spec.d_in == 1 and spec.d_out == 1
    first = spec.examples[0]
    assert first.targets[0] == pytest.approx(complex_wave(first.inputs[0]))
    eval_xs = [float(p.inputs[0]) for p in spec.eval_points]
    assert eval_xs == sorted(eval_xs)


def test_complex_wave_rejects_odd_boundary_count():
    with pytest.raises(ValueError):
        complex_wave_points(boundary_samples=3)


def test_identity_and_sine_datasets():
    identity = get_dataset("identity", points=[-2, 2])
    assert [float(ex.targets[0]) for ex in identity.examples] == [-2.0, 2.0]
    sine = get_dataset("sine", n_points=9, freq=1.0)
    assert len(sine) == 9
    assert sine.examples[4].targets[0] == pytest.approx(0.0)
    assert sine.provenance["type"] == "sine"


def test_curve_metrics():
    curve = [ApproximationPoint(0.0, 1.0, 1.0), ApproximationPoint(1.0, 3.0, 2.0)]
    metrics = curve_metrics(curve)
    assert metrics["mae"] == pytest.approx(0.5)
    assert metrics["rmse"] == pytest.approx(math.sqrt(0.5))
    assert curve_metrics([]) == {}


def test_sinks_and_summary(tmp_path):
    jsonl = JsonlSink(tmp_path / "metrics.jsonl", seed=3, sha="abc")
    csv_sink = CsvSink(tmp_path / "metrics.csv")
    for epoch, loss in enumerate([0.5, 0.25, 0.125], start=1):
        jsonl.on_epoch(epoch, {"loss": loss})
        csv_sink(epoch, {"loss": loss})

    records = [json.loads(line) for line in (tmp_path / "metrics.jsonl").read_text().splitlines()]
    assert [r["epoch"] for r in records] == [1, 2, 3]
    assert records[0]["sha"] == "abc" and records[0]["seed"] == 3
    with (tmp_path / "metrics.csv").open() as handle:
        rows = list(csv.DictReader(handle))
    assert len(rows) == 3 and float(rows[-1]["loss"]) == 0.125

    summary = json.loads(Path(write_summary(tmp_path / "metrics.jsonl", tmp_path / "summary.json")).read_text())
    loss = summary["metrics"]["loss"]
    assert summary["records"] == 3
    assert loss["min"] == 0.125 and loss["last"] == 0.125
    assert loss["tail_auc"] == pytest.approx(compute_auc([0.5, 0.25, 0.125]))
    assert "epoch" not in summary["metrics"]


def test_manifest_and_approximation_dump(tmp_path):
    manifest_path = write_manifest(
        tmp_path / "manifest.json",
        config={"train": {"seed": 1}},
        dataset_provenance={"type": "identity"},
        outcome={"status": "converged"},
    )
    manifest = json.loads(Path(manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 1
    assert manifest["dataset"]["type"] == "identity"
    assert manifest["outcome"]["status"] == "converged"

    path = write_approximation(tmp_path / "curve.csv", [ApproximationPoint(0.5, 1.0, 0.9)])
    with open(path, encoding="utf-8") as handle:
        rows = list(csv.reader(handle))
    assert rows == [["x", "y_target", "y_approx"], ["0.5", "1.0", "0.9"]]


def test_plot_adapter_headless(tmp_path):
    pytest.importorskip("matplotlib")
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    adapter.on_epoch(1, {"loss": 1.0})
    adapter.on_epoch(2, {"loss": 0.5})
    adapter.set_approximation([ApproximationPoint(x, x, 0.9 * x) for x in (-1.0, 0.0, 1.0)])
    written = adapter.close()
    assert (tmp_path / "loss.png").exists()
    assert (tmp_path / "approximation.png").exists()
    assert len(written) == 2


def test_plot_adapter_disabled_writes_nothing(tmp_path):
    adapter = PlotAdapter(tmp_path / "plots", enable_plots=False)
    adapter.on_epoch(1, {"loss": 1.0})
    assert adapter.close() == []
    assert not (tmp_path / "plots").exists()
