import json
import logging
from typing import Any

import ROOT

from .compare_logic import comparison_passed, status_from_metrics, summarize
from .root_io import ensure_parent, expand
from .settings import RuntimeConfig
from .tasks_common import collect_histograms


LOGGER = logging.getLogger("strareco.tasks")


def _open(path: str) -> Any:
    f = ROOT.TFile(expand(path))
    if not f or f.IsZombie():
        raise RuntimeError(f"Cannot open ROOT file: {path}")
    return f


def _contents(h: Any) -> list[float]:
    """Every cell of the histogram, under- and overflow included."""
    return [float(h.GetBinContent(i)) for i in range(h.GetNcells())]


def _metrics(h_ref: Any, h_cand: Any) -> dict[str, Any]:
    ref_entries = float(h_ref.GetEntries())
    cand_entries = float(h_cand.GetEntries())
    ref_cells = _contents(h_ref)
    cand_cells = _contents(h_cand)
    metrics: dict[str, Any] = {
        "reference_entries": ref_entries,
        "candidate_entries": cand_entries,
        "identical": ref_entries == cand_entries and ref_cells == cand_cells,
        "p_value": None,
    }
    if sum(ref_cells) > 0 and sum(cand_cells) > 0:
        # Candidates outside the axis ranges still count.
        metrics["p_value"] = float(h_ref.KolmogorovTest(h_cand, "UO"))
    if h_ref.GetDimension() == 1 and ref_entries > 0 and cand_entries > 0:
        metrics["mean_shift"] = float(h_cand.GetMean() - h_ref.GetMean())
    return metrics


def compare(reference_file: str, candidate_file: str, output_file: str, *, runtime_config: RuntimeConfig) -> dict[str, Any]:
    cfg = runtime_config
    if not reference_file:
        raise ValueError("Missing reference QA output: set compare.reference or paths.reference.")
    LOGGER.info("compare start reference=%s candidate=%s", reference_file, candidate_file)

    f_ref = _open(reference_file)
    f_cand = _open(candidate_file)
    ref = collect_histograms(f_ref)
    cand = collect_histograms(f_cand)
    f_ref.Close()
    f_cand.Close()

    histograms: dict[str, dict[str, Any]] = {}
    statuses: dict[str, str] = {}
    for path in sorted(ref):
        available = path in cand
        metrics = _metrics(ref[path], cand[path]) if available else {}
        status = status_from_metrics(available, metrics, cfg.compare_alpha)
        statuses[path] = status
        histograms[path] = {"status": status, **metrics}
        if status in ("KO", "MISSING"):
            LOGGER.warning("compare %s %s p=%s", status, path, metrics.get("p_value"))

    summary = summarize(statuses)
    result = {
        "reference": reference_file,
        "candidate": candidate_file,
        "alpha": cfg.compare_alpha,
        "summary": summary,
        "passed": comparison_passed(summary),
        "extra": sorted(set(cand) - set(ref)),
        "histograms": histograms,
    }

    out = expand(output_file)
    ensure_parent(out)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(result, f, indent=2, sort_keys=True)
    LOGGER.info("compare done %s passed=%s output=%s", " ".join(f"{k}={v}" for k, v in summary.items()), result["passed"], output_file)
    return result
