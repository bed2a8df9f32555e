import copy
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - runtime compatibility path
    import tomli as tomllib


DEFAULTS_PATH = Path(__file__).parent / "defaults.toml"
PROCESS_SWITCHES = ("process_mc", "process_generated_reconstructible", "process_pure_generated")
CONFIG_SECTIONS = (
    "run",
    "common",
    "tables",
    "event",
    "tracks",
    "mc",
    "v0setting",
    "cascadesetting",
    "compare",
    "paths",
)


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        cfg = tomllib.load(f)
    if not isinstance(cfg, dict):
        raise ValueError(f"Invalid defaults TOML at {path}: top-level table is missing.")
    return cfg


_DEFAULT_CONFIG_CACHE: dict[str, Any] = {}


def default_config_template() -> dict[str, Any]:
    if not _DEFAULT_CONFIG_CACHE:
        _DEFAULT_CONFIG_CACHE.update(_load_toml(DEFAULTS_PATH))
    return copy.deepcopy(_DEFAULT_CONFIG_CACHE)


def _required_table(table: dict[str, Any], key: str, context: str = "defaults") -> dict[str, Any]:
    value = table.get(key)
    if not isinstance(value, dict):
        raise ValueError(f"Missing or invalid [{key}] table in {context} config")
    return value


def _required_value(table: dict[str, Any], key: str, context: str) -> Any:
    if key not in table:
        raise ValueError(f"Missing required key '{context}.{key}'")
    return table[key]


def _positive(value: Any, name: str) -> float:
    out = float(value)
    if out <= 0:
        raise ValueError(f"{name} must be positive, got {out}.")
    return out


def _cosine(value: Any, name: str) -> float:
    out = float(value)
    if not -1.0 <= out <= 1.0:
        raise ValueError(f"{name} must lie in [-1, 1], got {out}.")
    return out


def _deep_merge_dict(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _deep_merge_dict(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def merge_config(cfg: dict[str, Any] | None) -> dict[str, Any]:
    merged = default_config_template()
    if not isinstance(cfg, dict):
        return merged
    return _deep_merge_dict(merged, cfg)


@dataclass(frozen=True)
class RuntimePaths:
    base_output_dir: str
    ao2d_filename: str
    analysis_output: str
    efficiency_output: str
    comparison_output: str
    metadata_output: str
    reference: str


@dataclass(frozen=True)
class TableNames:
    event: str
    v0: str
    cascade: str
    mc_particle: str


@dataclass(frozen=True)
class EventSettings:
    sel8_selection: bool
    posz_selection: bool
    max_posz: float


@dataclass(frozen=True)
class TrackSettings:
    min_tpc_crossed_rows: int
    min_its_clusters: int


@dataclass(frozen=True)
class V0Settings:
    cospa: float
    dcav0dau: float
    dcapostopv: float
    dcanegtopv: float
    radius: float


@dataclass(frozen=True)
class CascadeSettings:
    cospa: float
    dcacascdau: float
    dcabachtopv: float
    cascradius: float


@dataclass(frozen=True)
class RuntimeConfig:
    variant: str
    output_directory: str
    df_prefix: str
    tables: TableNames
    event: EventSettings
    tracks: TrackSettings
    v0: V0Settings
    cascade: CascadeSettings
    max_rapidity: float
    process: Mapping[str, bool]
    compare_alpha: float
    paths: RuntimePaths

    def process_enabled(self, switch: str) -> bool:
        if switch not in self.process:
            raise ValueError(f"Unknown process switch '{switch}'. Available: {', '.join(PROCESS_SWITCHES)}.")
        return self.process[switch]


def _build_runtime_paths(common: dict[str, Any], user_paths: dict[str, Any], compare_cfg: dict[str, Any]) -> RuntimePaths:
    mc_production = str(_required_value(common, "mc_production", "common"))
    variant = str(_required_value(common, "variant", "common"))
    base_input_dir = str(_required_value(common, "base_input_dir", "common"))
    base_output_root = str(_required_value(common, "base_output_root", "common"))
    ao2d_basename = str(_required_value(common, "ao2d_basename", "common"))

    base_output_dir = f"{base_output_root}{mc_production}/{variant}/"
    defaults = {
        "ao2d": f"{base_input_dir}MC/{mc_production}/{ao2d_basename}",
        "analysis_output": f"{base_output_dir}StraRecoQA.root",
        "efficiency_output": f"{base_output_dir}efficiency.root",
        "comparison_output": f"{base_output_dir}comparison.json",
        "metadata_output": f"{base_output_dir}run_metadata.json",
        "reference": str(compare_cfg.get("reference", "")),
    }
    resolved = {key: str(user_paths.get(key) or value) for key, value in defaults.items()}
    return RuntimePaths(
        base_output_dir=base_output_dir,
        ao2d_filename=resolved["ao2d"],
        analysis_output=resolved["analysis_output"],
        efficiency_output=resolved["efficiency_output"],
        comparison_output=resolved["comparison_output"],
        metadata_output=resolved["metadata_output"],
        reference=resolved["reference"],
    )


def current_runtime_config(cfg: dict[str, Any] | None = None) -> RuntimeConfig:
    merged = merge_config(cfg)

    run_cfg = _required_table(merged, "run", "config")
    common = _required_table(merged, "common", "config")
    tables = _required_table(merged, "tables", "config")
    event = _required_table(merged, "event", "config")
    tracks = _required_table(merged, "tracks", "config")
    mc = _required_table(merged, "mc", "config")
    v0 = _required_table(merged, "v0setting", "config")
    casc = _required_table(merged, "cascadesetting", "config")
    compare_cfg = _required_table(merged, "compare", "config")
    user_paths = merged.get("paths", {})
    if not isinstance(user_paths, dict):
        raise ValueError("Missing or invalid [paths] table in config")

    alpha = float(_required_value(compare_cfg, "alpha", "compare"))
    if not 0.0 < alpha < 1.0:
        raise ValueError(f"compare.alpha must lie in (0, 1), got {alpha}.")

    return RuntimeConfig(
        variant=str(_required_value(common, "variant", "common")),
        output_directory=str(_required_value(common, "output_directory", "common")),
        df_prefix=str(_required_value(common, "df_prefix", "common")),
        tables=TableNames(
            event=str(_required_value(tables, "event", "tables")),
            v0=str(_required_value(tables, "v0", "tables")),
            cascade=str(_required_value(tables, "cascade", "tables")),
            mc_particle=str(_required_value(tables, "mc_particle", "tables")),
        ),
        event=EventSettings(
            sel8_selection=bool(_required_value(event, "sel8_selection", "event")),
            posz_selection=bool(_required_value(event, "posZ_selection", "event")),
            max_posz=_positive(_required_value(event, "max_posZ", "event"), "event.max_posZ"),
        ),
        tracks=TrackSettings(
            min_tpc_crossed_rows=int(_required_value(tracks, "mincrossedrows", "tracks")),
            min_its_clusters=int(_required_value(tracks, "itsminclusters", "tracks")),
        ),
        v0=V0Settings(
            cospa=_cosine(_required_value(v0, "cospa", "v0setting"), "v0setting.cospa"),
            dcav0dau=_positive(_required_value(v0, "dcav0dau", "v0setting"), "v0setting.dcav0dau"),
            dcapostopv=float(_required_value(v0, "dcapostopv", "v0setting")),
            dcanegtopv=float(_required_value(v0, "dcanegtopv", "v0setting")),
            radius=float(_required_value(v0, "radius", "v0setting")),
        ),
        cascade=CascadeSettings(
            cospa=_cosine(_required_value(casc, "cospa", "cascadesetting"), "cascadesetting.cospa"),
            dcacascdau=_positive(_required_value(casc, "dcacascdau", "cascadesetting"), "cascadesetting.dcacascdau"),
            dcabachtopv=float(_required_value(casc, "dcabachtopv", "cascadesetting")),
            cascradius=float(_required_value(casc, "cascradius", "cascadesetting")),
        ),
        max_rapidity=_positive(_required_value(mc, "max_rapidity", "mc"), "mc.max_rapidity"),
        process=MappingProxyType({switch: bool(_required_value(run_cfg, switch, "run")) for switch in PROCESS_SWITCHES}),
        compare_alpha=alpha,
        paths=_build_runtime_paths(common, user_paths, compare_cfg),
    )
