"""Pipeline assembly: config -> dataset -> trainer -> run artifacts."""

from __future__ import annotations

import json
import logging
import time
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Sequence

from ..core.errors import ConfigurationError
from ..core.types import DEFAULT_LAYERS
from ..data import get_dataset
from ..reporting.artifacts import write_approximation, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .drivers import run_until_idle
from .metrics import curve_metrics
from .stopping import StoppingPolicy
from .trainer import DEFAULT_BATCH_SIZE, DEFAULT_LEARNING_RATE, Trainer

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "complex-wave": {
        "data": {
            "name": "complex_wave",
            "options": {"regular_samples": 40, "boundary_samples": 20, "margin": 0.1},
        },
        "model": {"layers": list(DEFAULT_LAYERS), "bias_range": 0.05},
        "train": {
            "learning_rate": 0.05,
            "batch_size": 10,
            "seed": 0,
            "stopping": {
                "loss_threshold": 1e-4,
                "min_epochs": 300,
                "max_epochs": 2000,
                "run_max_epochs": 1000,
            },
            "run_dir": "runs/complex-wave",
            "enable_plots": False,
        },
    },
    "identity-min": {
        "data": {"name": "identity", "options": {"points": [-1.0, 0.0, 1.0]}},
        "model": {"layers": [1, 4, 1]},
        "train": {
            "learning_rate": 0.05,
            "batch_size": 10,
            "seed": 7,
            "stopping": {"max_epochs": 2000, "run_max_epochs": None},
            "run_dir": "runs/identity-min",
            "enable_plots": False,
        },
    },
    "sine-small": {
        "data": {"name": "sine", "options": {"freq": 1.0, "n_points": 32, "seed": 0}},
        "model": {"layers": [1, 8, 8, 1]},
        "train": {
            "learning_rate": 0.03,
            "batch_size": 8,
            "seed": 3,
            "stopping": {"max_epochs": 200, "run_max_epochs": None},
            "run_dir": "runs/sine-small",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`run_pipeline`."""

    epochs: int
    status: str
    final_loss: float
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    approximation_path: str = ""


def read_config_file(path: str | Path) -> Mapping[str, object]:
    """Load a JSON or YAML mapping from ``path``."""

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise ConfigurationError(f"Unsupported config file type: {path.suffix}")
    text = path.read_text()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")

    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets(preset_dir: Path | None = None) -> Dict[str, Mapping[str, object]]:
    preset_dir = preset_dir or _PRESET_DIR
    found: Dict[str, Mapping[str, object]] = {}
    if not preset_dir.exists():
        return found
    for file in sorted(preset_dir.iterdir()):
        if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
            continue
        data = read_config_file(file)
        missing = {"data", "model", "train"} - set(data)
        if missing:
            raise ConfigurationError(
                f"Preset {file.name} is missing required sections: {', '.join(sorted(missing))}"
            )
        found[file.stem] = json.loads(json.dumps(data))
    return found


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    available = presets()
    try:
        return available[name]
    except KeyError as exc:
        raise ConfigurationError(
            f"Unknown preset: {name}. Available presets: {', '.join(sorted(available))}"
        ) from exc


def build_trainer(
    model_cfg: Mapping[str, object],
    train_cfg: Mapping[str, object],
    *,
    callbacks: Sequence[object] = (),
) -> Trainer:
    return Trainer(
        layers=[int(width) for width in model_cfg.get("layers", DEFAULT_LAYERS)],
        learning_rate=float(train_cfg.get("learning_rate", DEFAULT_LEARNING_RATE)),
        batch_size=int(train_cfg.get("batch_size", DEFAULT_BATCH_SIZE)),
        seed=train_cfg.get("seed"),
        policy=StoppingPolicy.from_config(train_cfg.get("stopping")),
        bias_range=float(model_cfg.get("bias_range", 0.05)),
        callbacks=callbacks,
    )


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train one network as described by ``config`` and write run artifacts."""

    missing = {"data", "model", "train"} - set(config)
    if missing:
        raise ConfigurationError(f"Config is missing sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)
    seed = train_cfg.get("seed")

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    trainer = build_trainer(model_cfg, train_cfg, callbacks=[jsonl, csv_sink, plots])

    layers = list(trainer.layers)
    if layers[0] != dataset.d_in or layers[-1] != dataset.d_out:
        raise ConfigurationError(
            f"Topology {layers} does not fit dataset {dataset.name!r} "
            f"(d_in={dataset.d_in}, d_out={dataset.d_out})"
        )

    _print_startup_summary(
        dataset_name=dataset.name,
        n_examples=len(dataset),
        layers=layers,
        learning_rate=trainer.learning_rate,
        batch_size=trainer.batch_size,
        policy=trainer.policy,
        param_count=trainer.parameters().parameter_count(),
    )

    started = time.perf_counter()
    run_id = trainer.start(dataset.examples, eval_points=dataset.eval_points)
    run_until_idle(trainer, run_id)
    elapsed = time.perf_counter() - started
    logger.info(
        "Finished %s after %d epochs in %.2fs", trainer.status.value, trainer.current_epoch(), elapsed
    )

    curve = trainer.approximation
    plots.set_approximation(curve)
    plots.close()
    approximation_path = write_approximation(run_dir / "approximation.csv", curve)

    safe_config = json.loads(json.dumps(config))
    outcome = {
        "status": trainer.status.value,
        "epochs": trainer.current_epoch(),
        "final_loss": trainer.current_loss(),
        "seconds": round(elapsed, 3),
    }
    outcome.update(curve_metrics(curve))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        outcome=outcome,
    )
    summary_path = write_summary(
        jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))
    )
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        epochs=trainer.current_epoch(),
        status=trainer.status.value,
        final_loss=trainer.current_loss(),
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        approximation_path=approximation_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    n_examples: int,
    layers: Sequence[int],
    learning_rate: float,
    batch_size: int,
    policy: StoppingPolicy,
    param_count: int,
) -> None:
    run_cap = policy.run_max_epochs if policy.run_max_epochs is not None else "-"
    print("=== swishfit run ===")
    print(f"Dataset       : {dataset_name} ({n_examples} examples)")
    print(f"Layers        : {list(layers)}")
    print(f"Learning rate : {learning_rate}")
    print(f"Batch size    : {batch_size}")
    print(f"Stopping      : loss < {policy.loss_threshold} after {policy.min_epochs} epochs")
    print(f"Epoch caps    : lifetime {policy.max_epochs}, per run {run_cap}")
    print(f"Parameters    : {param_count}")
    print("====================")


__all__ = ["RunResult", "build_trainer", "load_preset", "presets", "read_config_file", "run_pipeline"]
