from dataclasses import dataclass


MASS_PION = 0.13957039
MASS_KAON = 0.493677
MASS_PROTON = 0.93827208816
MASS_LAMBDA = 1.115683

V0 = "v0"
CASCADE = "cascade"


@dataclass(frozen=True)
class Species:
    name: str
    pdg_code: int
    kind: str
    mass_column: str
    mass_min: float
    mass_max: float
    label: str
    qa: bool = False


SPECIES = (
    Species("K0Short", 310, V0, "mK0Short", 0.400, 0.600, "K^{0}_{S}", qa=True),
    Species("Lambda", 3122, V0, "mLambda", 1.01, 1.21, "#Lambda", qa=True),
    Species("AntiLambda", -3122, V0, "mAntiLambda", 1.01, 1.21, "#bar{#Lambda}"),
    Species("XiMinus", 3312, CASCADE, "mXi", 1.22, 1.42, "#Xi^{-}", qa=True),
    Species("XiPlus", -3312, CASCADE, "mXi", 1.22, 1.42, "#bar{#Xi}^{+}"),
    Species("OmegaMinus", 3334, CASCADE, "mOmega", 1.57, 1.77, "#Omega^{-}", qa=True),
    Species("OmegaPlus", -3334, CASCADE, "mOmega", 1.57, 1.77, "#bar{#Omega}^{+}"),
)

SPECIES_BY_NAME = {sp.name: sp for sp in SPECIES}


def species_of_kind(kind: str) -> list[Species]:
    if kind not in (V0, CASCADE):
        raise ValueError(f"Unsupported candidate kind '{kind}'. Allowed: {V0}, {CASCADE}.")
    return [sp for sp in SPECIES if sp.kind == kind]


def get_species(name: str) -> Species:
    if name not in SPECIES_BY_NAME:
        raise ValueError(f"Unsupported species '{name}'. Available: {', '.join(SPECIES_BY_NAME)}.")
    return SPECIES_BY_NAME[name]
