import logging
from typing import Any

import ROOT

from .histograms import (
    EVENT_SELECTION_LABELS,
    EVENT_SELECTION_NAME,
    GEN_PREFIX,
    GEN_WITH_PV_PREFIX,
    all_specs,
    generated_spec,
    mass_spec,
    qa_specs,
)
from .root_io import (
    book_histogram,
    build_rdf_from_ao2d,
    declare_helpers,
    define_columns_for_cascade,
    define_columns_for_mc_particles,
    define_columns_for_v0,
    empty_histogram,
    ensure_parent,
    expand,
    release_chains,
    with_frame_key,
    write_hist,
)
from .selections import (
    cascade_candidate_selection,
    cascade_topology,
    event_selection_steps,
    generated_acceptance,
    join_selections,
    pdg_selection,
    v0_candidate_selection,
    v0_topology,
)
from .settings import RuntimeConfig
from .species import CASCADE, SPECIES, V0, species_of_kind
from .tasks_common import collect_rresult_ptrs, fill_counter, run_graphs


LOGGER = logging.getLogger("strareco.tasks")

_CANVASES: list[Any] = []


def _book_event_selection(df_events: Any, cfg: RuntimeConfig) -> list[Any]:
    return [df_events.Filter(sel).Count() if sel != "true" else df_events.Count() for _, sel in event_selection_steps(cfg)]


def _book_reco_mc_collisions(df_events: Any) -> Any:
    """Keys of the MC collisions with at least one reconstructed collision.

    Labels are local to a data frame, so the key carries the frame as well.
    """
    return (
        with_frame_key(df_events)
        .Filter("fMcCollisionId > -1")
        .Define("recoKey", 'frameKey + ":" + std::to_string(fMcCollisionId)')
        .Take["std::string"]("recoKey")
    )


def _book_candidates(df: Any, kind: str, selection: str, topology: str) -> dict[str, Any]:
    df_sel = df.Filter(selection, f"{kind} candidates")
    booked: dict[str, Any] = {}
    for sp in species_of_kind(kind):
        df_sp = df_sel.Filter(pdg_selection(sp))
        for spec in qa_specs(sp):
            booked[spec.name] = book_histogram(df_sp, spec)
        spec = mass_spec(sp)
        booked[spec.name] = book_histogram(df_sp.Filter(topology), spec)
    return booked


def _book_generated(df_mc: Any, cfg: RuntimeConfig, prefix: str, selection: str = "true") -> dict[str, Any]:
    df_acc = df_mc.Filter(join_selections(generated_acceptance(cfg), selection))
    booked: dict[str, Any] = {}
    for sp in SPECIES:
        spec = generated_spec(sp, prefix)
        booked[spec.name] = book_histogram(df_acc.Filter(pdg_selection(sp)), spec)
    return booked


def _draw_mass_peaks(booked: dict[str, Any]) -> None:
    for sp in SPECIES:
        name = mass_spec(sp).name
        if name not in booked:
            continue
        c = ROOT.TCanvas(f"c{name}", name)
        c.SetRightMargin(0.15)
        booked[name].DrawClone("colz")
        _CANVASES.append(c)


def _write_qa_output(booked: dict[str, Any], evsel_counts: list[int], output_file: str, cfg: RuntimeConfig) -> None:
    out_name = expand(output_file)
    ensure_parent(out_name)
    out = ROOT.TFile(out_name, "recreate")
    d0 = out.mkdir(cfg.output_directory)
    d0.cd()
    for spec in all_specs():
        if spec.name == EVENT_SELECTION_NAME:
            hist = empty_histogram(spec)
            fill_counter(hist, evsel_counts or [0] * len(EVENT_SELECTION_LABELS), EVENT_SELECTION_LABELS)
            write_hist(hist)
        elif spec.name in booked:
            write_hist(booked[spec.name], spec.name)
        else:
            # Disabled process functions still leave their histograms in the output.
            write_hist(empty_histogram(spec))
    out.Close()


def analyse_mc(input_file: str | list[str], output_file: str, draw: bool = False, *, runtime_config: RuntimeConfig) -> dict[str, Any]:
    cfg = runtime_config
    LOGGER.info("analyse_mc start input=%s output=%s", input_file, output_file)
    ROOT.gStyle.SetOptStat(0)
    declare_helpers()
    # Frames chained for a previous run are no longer read.
    release_chains()

    process_mc = cfg.process_enabled("process_mc")
    gen_with_pv = cfg.process_enabled("process_generated_reconstructible")
    pure_gen = cfg.process_enabled("process_pure_generated")
    if not (process_mc or gen_with_pv or pure_gen):
        LOGGER.warning("analyse_mc: every process switch is off, writing empty histograms")

    df_events = build_rdf_from_ao2d(cfg.tables.event, input_file, cfg.df_prefix) if (process_mc or gen_with_pv) else None

    evsel_actions: list[Any] = []
    reco_keys = None
    if process_mc:
        evsel_actions = _book_event_selection(df_events, cfg)
    if gen_with_pv:
        reco_keys = _book_reco_mc_collisions(df_events)
    run_graphs(evsel_actions + ([reco_keys] if reco_keys is not None else []))

    if reco_keys is not None:
        keys = reco_keys.GetValue()
        ROOT.strareco_setRecoMcCollisions(keys)
        LOGGER.info("MC collisions with a reconstructed collision: %d", len({str(k) for k in keys}))

    booked: dict[str, Any] = {}
    if process_mc:
        df_v0 = define_columns_for_v0(build_rdf_from_ao2d(cfg.tables.v0, input_file, cfg.df_prefix))
        booked.update(_book_candidates(df_v0, V0, v0_candidate_selection(cfg), v0_topology(cfg)))
        df_casc = define_columns_for_cascade(build_rdf_from_ao2d(cfg.tables.cascade, input_file, cfg.df_prefix))
        booked.update(_book_candidates(df_casc, CASCADE, cascade_candidate_selection(cfg), cascade_topology(cfg)))

    if gen_with_pv or pure_gen:
        df_mc = define_columns_for_mc_particles(build_rdf_from_ao2d(cfg.tables.mc_particle, input_file, cfg.df_prefix))
        if gen_with_pv:
            df_mc_pv = with_frame_key(df_mc).Define("hasRecoCollision", "strareco_hasRecoCollision(frameKey, fMcCollisionId)")
            booked.update(_book_generated(df_mc_pv, cfg, GEN_WITH_PV_PREFIX, "hasRecoCollision"))
        if pure_gen:
            booked.update(_book_generated(df_mc, cfg, GEN_PREFIX))

    run_graphs(collect_rresult_ptrs(booked))

    evsel_counts = [int(c.GetValue()) for c in evsel_actions]
    if evsel_counts:
        LOGGER.info("event selection %s", ", ".join(f"{label}={n}" for label, n in zip(EVENT_SELECTION_LABELS, evsel_counts)))
    for sp in SPECIES:
        name = mass_spec(sp).name
        if name in booked:
            LOGGER.info("%s entries=%d", name, int(booked[name].GetValue().GetEntries()))

    if draw:
        _draw_mass_peaks(booked)
    _write_qa_output(booked, evsel_counts, output_file, cfg)
    LOGGER.info("analyse_mc done output=%s", output_file)
    return {"event_selection": evsel_counts, "booked": sorted(booked)}
