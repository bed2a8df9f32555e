import glob
import logging
import os
from pathlib import Path
from typing import Any

import ROOT

from .histograms import HistogramSpec
from .species import MASS_KAON, MASS_LAMBDA, MASS_PION, MASS_PROTON


LOGGER = logging.getLogger("strareco.io")

_DECLARED = False
# RDataFrame does not own the chains it reads from.
_CHAINS: list[Any] = []


def expand(path: str) -> str:
    return os.path.expandvars(os.path.expanduser(str(path)))


def ensure_parent(path: str) -> None:
    Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)


def declare_helpers() -> None:
    global _DECLARED
    if _DECLARED:
        return
    ROOT.gInterpreter.Declare(
        r'''
        #include <algorithm>
        #include <cmath>
        #include <string>
        #include <unordered_set>
        #include <vector>
        double strareco_cosPA(double pvx, double pvy, double pvz, double x, double y, double z, double px, double py, double pz) {
          double dx = x - pvx, dy = y - pvy, dz = z - pvz;
          double norm = std::sqrt((dx * dx + dy * dy + dz * dz) * (px * px + py * py + pz * pz));
          if (norm <= 0.) return -1.;
          return std::clamp((dx * px + dy * py + dz * pz) / norm, -1., 1.);
        }
        double strareco_dcaToPV(double pvx, double pvy, double pvz, double x, double y, double z, double px, double py, double pz) {
          double dx = x - pvx, dy = y - pvy, dz = z - pvz;
          double cx = dy * pz - dz * py, cy = dz * px - dx * pz, cz = dx * py - dy * px;
          double p = std::sqrt(px * px + py * py + pz * pz);
          if (p <= 0.) return 1.e9;
          return std::sqrt(cx * cx + cy * cy + cz * cz) / p;
        }
        double strareco_invMass(double px1, double py1, double pz1, double m1, double px2, double py2, double pz2, double m2) {
          double e = std::sqrt(px1 * px1 + py1 * py1 + pz1 * pz1 + m1 * m1) + std::sqrt(px2 * px2 + py2 * py2 + pz2 * pz2 + m2 * m2);
          double px = px1 + px2, py = py1 + py2, pz = pz1 + pz2;
          return std::sqrt(std::max(0., e * e - px * px - py * py - pz * pz));
        }
        double strareco_rapidity(double e, double pz) {
          if (e <= std::abs(pz)) return 1.e9;
          return 0.5 * std::log((e + pz) / (e - pz));
        }
        std::string strareco_frameKey(const std::string& sample) {
          auto pos = sample.rfind('/');
          return pos == std::string::npos ? sample : sample.substr(0, pos);
        }
        std::unordered_set<std::string> strareco_recoMcCollisions;
        void strareco_setRecoMcCollisions(const std::vector<std::string>& keys) {
          strareco_recoMcCollisions.clear();
          strareco_recoMcCollisions.insert(keys.begin(), keys.end());
        }
        bool strareco_hasRecoCollision(const std::string& frame, int mcCollisionId) {
          return strareco_recoMcCollisions.count(frame + ":" + std::to_string(mcCollisionId)) > 0;
        }
        '''
    )
    _DECLARED = True


def input_files(input_file: str | list[str]) -> list[str]:
    """Resolve a path, a glob pattern, a list of those, or a .txt file list."""
    raw = [input_file] if isinstance(input_file, str) else list(input_file)
    out: list[str] = []
    for entry in raw:
        path = expand(entry).strip()
        if not path:
            continue
        if path.endswith(".txt"):
            with open(path, encoding="utf-8") as f:
                out.extend(input_files([line.strip() for line in f if line.strip() and not line.startswith("#")]))
        elif any(ch in path for ch in "*?["):
            out.extend(sorted(glob.glob(path)))
        else:
            out.append(path)
    if not out:
        raise RuntimeError(f"No input files resolved from {input_file!r}.")
    return out


def tree_paths(tree_name: str, input_file: str | list[str], df_prefix: str = "DF_") -> list[str]:
    paths: list[str] = []
    for file_name in input_files(input_file):
        f = ROOT.TFile.Open(file_name)
        if not f or f.IsZombie():
            raise RuntimeError(f"Cannot open input file: {file_name}")
        frames = [str(key.GetName()) for key in f.GetListOfKeys() if str(key.GetName()).startswith(df_prefix)]
        if not frames and f.Get(tree_name):
            paths.append(f"{file_name}/{tree_name}")
        for frame in sorted(set(frames)):
            if f.Get(f"{frame}/{tree_name}"):
                paths.append(f"{file_name}/{frame}/{tree_name}")
            else:
                LOGGER.warning("Tree %s missing in %s/%s", tree_name, file_name, frame)
        f.Close()
    if not paths:
        raise RuntimeError(f"Tree '{tree_name}' not found in {input_file!r}.")
    return paths


def build_rdf_from_ao2d(tree_name: str, input_file: str | list[str], df_prefix: str = "DF_") -> Any:
    chain = ROOT.TChain(tree_name)
    for path in tree_paths(tree_name, input_file, df_prefix):
        chain.Add(path)
    _CHAINS.append(chain)
    LOGGER.debug("Chained %d frames for %s", chain.GetNtrees(), tree_name)
    return ROOT.RDataFrame(chain)


def release_chains() -> None:
    _CHAINS.clear()


def with_frame_key(df: Any) -> Any:
    declare_helpers()
    return df.DefinePerSample("frameKey", "strareco_frameKey(rdfsampleinfo_.AsString())")


def define_columns_for_v0(df: Any) -> Any:
    declare_helpers()
    return (
        df.Define("pxV0", "fPxPos + fPxNeg")
        .Define("pyV0", "fPyPos + fPyNeg")
        .Define("pzV0", "fPzPos + fPzNeg")
        .Define("pt", "std::hypot(pxV0, pyV0)")
        .Define("v0radius", "std::hypot(fX, fY)")
        .Define("v0cosPA", "strareco_cosPA(fPosX, fPosY, fPosZ, fX, fY, fZ, pxV0, pyV0, pzV0)")
        .Define("v0PointingAngle", "std::acos(v0cosPA)")
        .Define("dcav0topv", "strareco_dcaToPV(fPosX, fPosY, fPosZ, fX, fY, fZ, pxV0, pyV0, pzV0)")
        .Define("mK0Short", f"strareco_invMass(fPxPos, fPyPos, fPzPos, {MASS_PION}, fPxNeg, fPyNeg, fPzNeg, {MASS_PION})")
        .Define("mLambda", f"strareco_invMass(fPxPos, fPyPos, fPzPos, {MASS_PROTON}, fPxNeg, fPyNeg, fPzNeg, {MASS_PION})")
        .Define("mAntiLambda", f"strareco_invMass(fPxPos, fPyPos, fPzPos, {MASS_PION}, fPxNeg, fPyNeg, fPzNeg, {MASS_PROTON})")
        .Define("yMC", "strareco_rapidity(fMcE, fMcPz)")
    )


def define_columns_for_cascade(df: Any) -> Any:
    declare_helpers()
    return (
        df.Define("pxV0", "fPxPos + fPxNeg")
        .Define("pyV0", "fPyPos + fPyNeg")
        .Define("pzV0", "fPzPos + fPzNeg")
        .Define("pxCasc", "pxV0 + fPxBach")
        .Define("pyCasc", "pyV0 + fPyBach")
        .Define("pzCasc", "pzV0 + fPzBach")
        .Define("pt", "std::hypot(pxCasc, pyCasc)")
        .Define("v0radius", "std::hypot(fXLambda, fYLambda)")
        .Define("cascradius", "std::hypot(fX, fY)")
        .Define("v0cosPA", "strareco_cosPA(fPosX, fPosY, fPosZ, fXLambda, fYLambda, fZLambda, pxV0, pyV0, pzV0)")
        .Define("casccosPA", "strareco_cosPA(fPosX, fPosY, fPosZ, fX, fY, fZ, pxCasc, pyCasc, pzCasc)")
        .Define("cascPointingAngle", "std::acos(casccosPA)")
        .Define("mXi", f"strareco_invMass(pxV0, pyV0, pzV0, {MASS_LAMBDA}, fPxBach, fPyBach, fPzBach, {MASS_PION})")
        .Define("mOmega", f"strareco_invMass(pxV0, pyV0, pzV0, {MASS_LAMBDA}, fPxBach, fPyBach, fPzBach, {MASS_KAON})")
        .Define("yMC", "strareco_rapidity(fMcE, fMcPz)")
    )


def define_columns_for_mc_particles(df: Any) -> Any:
    declare_helpers()
    return df.Define("pt", "std::hypot(fPx, fPy)").Define("yMC", "strareco_rapidity(fE, fPz)")


def h1_model(spec: HistogramSpec) -> Any:
    return ROOT.RDF.TH1DModel(spec.name, spec.title, spec.x.nbins, spec.x.xmin, spec.x.xmax)


def h2_model(spec: HistogramSpec) -> Any:
    if spec.y is None:
        raise ValueError(f"Histogram {spec.name} has no y axis.")
    return ROOT.RDF.TH2DModel(spec.name, spec.title, spec.x.nbins, spec.x.xmin, spec.x.xmax, spec.y.nbins, spec.y.xmin, spec.y.xmax)


def book_histogram(df: Any, spec: HistogramSpec) -> Any:
    if spec.dimension == 1:
        return df.Histo1D(h1_model(spec), spec.x_column)
    return df.Histo2D(h2_model(spec), spec.x_column, spec.y_column)


def empty_histogram(spec: HistogramSpec) -> Any:
    if spec.dimension == 1:
        hist = ROOT.TH1D(spec.name, spec.title, spec.x.nbins, spec.x.xmin, spec.x.xmax)
    else:
        hist = ROOT.TH2D(spec.name, spec.title, spec.x.nbins, spec.x.xmin, spec.x.xmax, spec.y.nbins, spec.y.xmin, spec.y.xmax)
    hist.SetDirectory(0)
    return hist


def write_hist(obj: Any, name: str | None = None) -> None:
    hist = obj.GetValue() if hasattr(obj, "GetValue") else obj
    if name:
        hist.Write(name)
    else:
        hist.Write()
