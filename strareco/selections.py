from .settings import RuntimeConfig
from .species import Species


V0_PRONGS = ("Pos", "Neg")
CASCADE_PRONGS = ("Pos", "Neg", "Bach")


def join_selections(*exprs: str) -> str:
    parts = [str(e).strip() for e in exprs if str(e).strip() and str(e).strip() != "true"]
    if not parts:
        return "true"
    if len(parts) == 1:
        return parts[0]
    return " && ".join(f"({p})" for p in parts)


def event_selection_steps(cfg: RuntimeConfig) -> list[tuple[str, str]]:
    """Cumulative event selection, one (label, selection) pair per counter bin.

    A disabled step keeps the counter bin and lets every collision through.
    """
    sel8 = "fSel8" if cfg.event.sel8_selection else "true"
    posz = f"std::abs(fPosZ) <= {cfg.event.max_posz}" if cfg.event.posz_selection else "true"
    return [
        ("All collisions", "true"),
        ("Sel8 cut", sel8),
        ("posZ cut", join_selections(sel8, posz)),
    ]


def event_selection(cfg: RuntimeConfig) -> str:
    return event_selection_steps(cfg)[-1][1]


def daughter_quality(cfg: RuntimeConfig, prongs: tuple[str, ...]) -> str:
    its = cfg.tracks.min_its_clusters
    tpc = cfg.tracks.min_tpc_crossed_rows
    return join_selections(*[f"f{p}ITSNCls >= {its} && f{p}TPCNClsCrossedRows >= {tpc}" for p in prongs])


def v0_prefilter(cfg: RuntimeConfig) -> str:
    v0 = cfg.v0
    return (
        f"fMcParticleId > -1 && std::abs(fDCAPosToPV) > {v0.dcapostopv} && "
        f"std::abs(fDCANegToPV) > {v0.dcanegtopv} && fDCAV0Daughters < {v0.dcav0dau}"
    )


def v0_association(cfg: RuntimeConfig) -> str:
    return (
        "fMcParticleId > -1 && fPosMcParticleId > -1 && fNegMcParticleId > -1 && "
        f"std::abs(yMC) <= {cfg.max_rapidity}"
    )


def v0_topology(cfg: RuntimeConfig) -> str:
    v0 = cfg.v0
    return f"v0radius > {v0.radius} && v0cosPA > {v0.cospa} && fDCAV0Daughters < {v0.dcav0dau}"


def cascade_prefilter(cfg: RuntimeConfig) -> str:
    v0 = cfg.v0
    casc = cfg.cascade
    return (
        f"fMcParticleId > -1 && std::abs(fDCAPosToPV) > {v0.dcapostopv} && "
        f"std::abs(fDCANegToPV) > {v0.dcanegtopv} && std::abs(fDCABachToPV) > {casc.dcabachtopv} && "
        f"fDCAV0Daughters < {v0.dcav0dau} && fDCACascDaughters < {casc.dcacascdau}"
    )


def cascade_association(cfg: RuntimeConfig) -> str:
    return f"fHasV0Data && std::abs(yMC) <= {cfg.max_rapidity}"


def cascade_topology(cfg: RuntimeConfig) -> str:
    v0 = cfg.v0
    casc = cfg.cascade
    return (
        f"v0radius > {v0.radius} && cascradius > {casc.cascradius} && v0cosPA > {v0.cospa} && "
        f"casccosPA > {casc.cospa} && fDCAV0Daughters < {v0.dcav0dau}"
    )


def v0_candidate_selection(cfg: RuntimeConfig) -> str:
    """Everything a V0 must pass before it enters the QA histograms."""
    return join_selections(event_selection(cfg), v0_prefilter(cfg), v0_association(cfg), daughter_quality(cfg, V0_PRONGS))


def cascade_candidate_selection(cfg: RuntimeConfig) -> str:
    return join_selections(
        event_selection(cfg),
        cascade_prefilter(cfg),
        cascade_association(cfg),
        daughter_quality(cfg, CASCADE_PRONGS),
    )


def generated_acceptance(cfg: RuntimeConfig) -> str:
    return f"std::abs(yMC) < {cfg.max_rapidity}"


def pdg_selection(species: Species) -> str:
    return f"fPdgCode == {species.pdg_code}"
