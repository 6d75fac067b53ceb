"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

from ..core.types import ApproximationPoint


class PlotAdapter:
    """Collect epoch losses and optionally emit matplotlib figures."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float]] = []
        self._curve: Sequence[ApproximationPoint] = ()
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics):
        if not self.enable_plots:
            return
        self._history.append((epoch, float(metrics.get("loss", 0.0))))

    def set_approximation(self, curve: Sequence[ApproximationPoint]) -> None:
        self._curve = tuple(curve)

    def close(self) -> List[Path]:
        """Write ``loss.png`` and ``approximation.png``; return the paths written."""

        if not self.enable_plots:
            return []
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        written: List[Path] = []
        if self._history:
            epochs, losses = zip(*self._history)
            fig, ax = plt.subplots()
            ax.plot(epochs, losses)
            ax.set_yscale("log")
            ax.set_xlabel("Epoch")
            ax.set_ylabel("MSE")
            ax.set_title("Training loss")
            path = self.run_dir / "loss.png"
            fig.savefig(path)
            plt.close(fig)
            written.append(path)

        if self._curve:
            points = sorted(self._curve, key=lambda p: p.x)
            xs = [p.x for p in points]
            fig, ax = plt.subplots()
            ax.plot(xs, [p.y_target for p in points], label="Target function")
            ax.plot(xs, [p.y_approx for p in points], label="Approximation")
            ax.set_xlabel("x")
            ax.set_ylabel("y")
            ax.legend()
            path = self.run_dir / "approximation.png"
            fig.savefig(path)
            plt.close(fig)
            written.append(path)
        return written

    __call__ = on_epoch
