"""Histogram definitions of the strangeness reconstruction QA output.

Names and binning follow the QA output of the O2 task, so that files
produced here can be compared bin by bin with the ones from the grid.
"""

from dataclasses import dataclass

from .species import CASCADE, SPECIES, V0, Species


@dataclass(frozen=True)
class Axis:
    nbins: int
    xmin: float
    xmax: float
    title: str = ""


@dataclass(frozen=True)
class HistogramSpec:
    name: str
    x: Axis
    x_column: str
    y: Axis | None = None
    y_column: str = ""

    @property
    def dimension(self) -> int:
        return 1 if self.y is None else 2

    @property
    def title(self) -> str:
        if self.y is None:
            return f"{self.name};{self.x.title};Counts"
        return f"{self.name};{self.x.title};{self.y.title}"


PT_TITLE = "#it{p}_{T} (GeV/#it{c})"
PT_AXIS = Axis(100, 0.0, 10.0, PT_TITLE)
PT_QA_AXIS = Axis(10, 0.0, 10.0, PT_TITLE)
MASS_NBINS = 400

# (histogram suffix, column, axis)
V0_QA_VARIABLES = (
    ("V0Radius", "v0radius", Axis(200, 0.0, 50.0, "V0 radius (cm)")),
    ("DCAV0Dau", "fDCAV0Daughters", Axis(100, 0.0, 2.0, "DCA V0 daughters (cm)")),
    ("DCAPosToPV", "fDCAPosToPV", Axis(200, -2.0, 2.0, "DCA pos. to PV (cm)")),
    ("DCANegToPV", "fDCANegToPV", Axis(200, -2.0, 2.0, "DCA neg. to PV (cm)")),
    ("DCAToPV", "dcav0topv", Axis(200, 0.0, 2.0, "DCA V0 to PV (cm)")),
    ("PointingAngle", "v0PointingAngle", Axis(200, 0.0, 1.0, "Pointing angle (rad)")),
)

CASCADE_QA_VARIABLES = (
    ("V0Radius", "v0radius", Axis(200, 0.0, 50.0, "V0 radius (cm)")),
    ("CascadeRadius", "cascradius", Axis(200, 0.0, 50.0, "Cascade radius (cm)")),
    ("DCAV0Dau", "fDCAV0Daughters", Axis(100, 0.0, 2.0, "DCA V0 daughters (cm)")),
    ("DCACascDau", "fDCACascDaughters", Axis(100, 0.0, 2.0, "DCA cascade daughters (cm)")),
    ("DCAPosToPV", "fDCAPosToPV", Axis(200, -2.0, 2.0, "DCA pos. to PV (cm)")),
    ("DCANegToPV", "fDCANegToPV", Axis(200, -2.0, 2.0, "DCA neg. to PV (cm)")),
    ("DCABachToPV", "fDCABachToPV", Axis(200, -2.0, 2.0, "DCA bach. to PV (cm)")),
    ("DCACascToPV", "fDCAXYCascToPV", Axis(200, -2.0, 2.0, "DCA_{xy} cascade to PV (cm)")),
    ("PointingAngle", "cascPointingAngle", Axis(200, 0.0, 1.0, "Pointing angle (rad)")),
)

EVENT_SELECTION_NAME = "hEventSelection"
EVENT_SELECTION_LABELS = ("All collisions", "Sel8 cut", "posZ cut")
EVENT_SELECTION_AXIS = Axis(3, -0.5, 2.5, "Event selection step")

GEN_PREFIX = "hGen"
GEN_WITH_PV_PREFIX = "hGenWithPV"
MASS_PREFIX = "h2dMass"


def generated_spec(species: Species, prefix: str = GEN_PREFIX) -> HistogramSpec:
    if prefix not in (GEN_PREFIX, GEN_WITH_PV_PREFIX):
        raise ValueError(f"Unsupported generated histogram prefix '{prefix}'.")
    return HistogramSpec(f"{prefix}{species.name}", PT_AXIS, "pt")


def mass_spec(species: Species) -> HistogramSpec:
    mass_axis = Axis(MASS_NBINS, species.mass_min, species.mass_max, "Inv. Mass (GeV/#it{c}^{2})")
    return HistogramSpec(f"{MASS_PREFIX}{species.name}", PT_AXIS, "pt", mass_axis, species.mass_column)


def qa_specs(species: Species) -> list[HistogramSpec]:
    if not species.qa:
        return []
    variables = V0_QA_VARIABLES if species.kind == V0 else CASCADE_QA_VARIABLES
    return [HistogramSpec(f"h2d{species.name}QA{suffix}", PT_QA_AXIS, "pt", axis, column) for suffix, column, axis in variables]


def event_selection_spec() -> HistogramSpec:
    return HistogramSpec(EVENT_SELECTION_NAME, EVENT_SELECTION_AXIS, "evselStep")


def all_specs() -> list[HistogramSpec]:
    out = [event_selection_spec()]
    for prefix in (GEN_PREFIX, GEN_WITH_PV_PREFIX):
        out.extend(generated_spec(sp, prefix) for sp in SPECIES)
    out.extend(mass_spec(sp) for sp in SPECIES)
    for kind in (V0, CASCADE):
        for sp in SPECIES:
            if sp.kind == kind:
                out.extend(qa_specs(sp))
    return out
