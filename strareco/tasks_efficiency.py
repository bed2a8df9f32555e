import logging
from typing import Any

import ROOT

from .histograms import GEN_PREFIX, GEN_WITH_PV_PREFIX, generated_spec, mass_spec
from .root_io import ensure_parent, expand
from .settings import RuntimeConfig
from .species import SPECIES


LOGGER = logging.getLogger("strareco.tasks")

EFF_AXIS_TITLE = "Efficiency #times Acceptance"


def _get(root_file: Any, path: str) -> Any:
    obj = root_file.Get(path)
    if not obj:
        raise RuntimeError(f"Missing histogram in QA output: {path}")
    return obj


def _ratio(num: Any, den: Any, name: str, y_title: str) -> Any:
    out = num.Clone(name)
    out.SetDirectory(0)
    out.SetTitle(name)
    out.Divide(num, den, 1.0, 1.0, "B")
    out.GetYaxis().SetTitle(y_title)
    return out


def _integral_ratio(num: Any, den: Any) -> float:
    d = den.Integral()
    return num.Integral() / d if d > 0 else 0.0


def efficiency(analysis_file: str, output_file: str, *, runtime_config: RuntimeConfig) -> dict[str, dict[str, float]]:
    cfg = runtime_config
    LOGGER.info("efficiency start input=%s output=%s", analysis_file, output_file)
    f_in = ROOT.TFile(expand(analysis_file))
    if not f_in or f_in.IsZombie():
        raise RuntimeError(f"Cannot open QA output: {analysis_file}")

    out = None
    try:
        base = cfg.output_directory
        # Look everything up first so a broken input leaves no output behind.
        inputs = {
            sp.name: (
                _get(f_in, f"{base}/{mass_spec(sp).name}"),
                _get(f_in, f"{base}/{generated_spec(sp, GEN_PREFIX).name}"),
                _get(f_in, f"{base}/{generated_spec(sp, GEN_WITH_PV_PREFIX).name}"),
            )
            for sp in SPECIES
        }

        out_name = expand(output_file)
        ensure_parent(out_name)
        out = ROOT.TFile(out_name, "recreate")
        d0 = out.mkdir("efficiency")
        d0.cd()

        summary: dict[str, dict[str, float]] = {}
        for sp in SPECIES:
            h_mass, h_gen, h_gen_pv = inputs[sp.name]

            # All reconstructed candidates, including those outside the mass window.
            h_reco = h_mass.ProjectionX(f"hReco{sp.name}")
            h_reco.SetDirectory(0)
            h_reco.GetYaxis().SetTitle("Counts")
            h_reco.Write()

            _ratio(h_reco, h_gen, f"eff{sp.name}", EFF_AXIS_TITLE).Write()
            _ratio(h_reco, h_gen_pv, f"effWithPV{sp.name}", EFF_AXIS_TITLE).Write()
            _ratio(h_gen_pv, h_gen, f"pvEff{sp.name}", "Fraction with reconstructed PV").Write()

            summary[sp.name] = {
                "reconstructed": float(h_reco.Integral()),
                "generated": float(h_gen.Integral()),
                "generated_with_pv": float(h_gen_pv.Integral()),
                "efficiency": _integral_ratio(h_reco, h_gen),
                "efficiency_with_pv": _integral_ratio(h_reco, h_gen_pv),
                "pv_efficiency": _integral_ratio(h_gen_pv, h_gen),
            }
            LOGGER.info(
                "%s eff=%.4f effWithPV=%.4f pvEff=%.4f",
                sp.name,
                summary[sp.name]["efficiency"],
                summary[sp.name]["efficiency_with_pv"],
                summary[sp.name]["pv_efficiency"],
            )
    finally:
        if out is not None:
            out.Close()
        f_in.Close()
    LOGGER.info("efficiency done output=%s", output_file)
    return summary
