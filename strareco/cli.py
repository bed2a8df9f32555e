import argparse
import copy
from datetime import datetime, timezone
import json
import logging
import subprocess
import sys
import time
try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - runtime compatibility path
    import tomli as tomllib

from . import settings as s


LOGGER = logging.getLogger("strareco")

TASKS = ("analyse_mc", "efficiency", "compare", "full_chain")


def _setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    lvl = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)] + ([logging.FileHandler(log_file)] if log_file else []),
        force=True,
    )


def _git_revision() -> str:
    try:
        out = subprocess.run(["git", "rev-parse", "HEAD"], check=True, capture_output=True, text=True)
        return out.stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


def _write_metadata(path: str, payload: dict) -> None:
    from .root_io import ensure_parent, expand

    out = expand(path)
    ensure_parent(out)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)


def default_config() -> dict:
    return s.default_config_template()


def _parse_task(run_cfg: dict) -> str:
    task = str(run_cfg.get("task", "analyse_mc")).strip().lower()
    if task not in TASKS:
        raise ValueError(f"Unsupported task: {task}. Allowed: {', '.join(TASKS)}.")
    return task


def run(cfg: dict) -> int:
    run_cfg = cfg.get("run", {})
    path_cfg_for_log = cfg.get("paths", {})
    _setup_logging(str(run_cfg.get("log_level", "INFO")), str(path_cfg_for_log.get("log_file", "") or ""))
    task = _parse_task(run_cfg)
    LOGGER.info("Starting run task=%s", task)

    runtime_cfg = s.current_runtime_config(cfg)
    paths = runtime_cfg.paths

    import ROOT

    from . import tasks

    enable_mt = bool(run_cfg.get("enable_mt", True))
    nthreads = int(run_cfg.get("nthreads", 0))
    draw = bool(run_cfg.get("draw", False))
    if enable_mt and task in ("analyse_mc", "full_chain"):
        if nthreads > 0:
            ROOT.EnableImplicitMT(nthreads)
        else:
            ROOT.EnableImplicitMT()

    t0 = time.time()
    status = 0
    if task == "analyse_mc":
        tasks.analyse_mc(paths.ao2d_filename, paths.analysis_output, draw, runtime_config=runtime_cfg)
    elif task == "efficiency":
        tasks.efficiency(paths.analysis_output, paths.efficiency_output, runtime_config=runtime_cfg)
    elif task == "compare":
        result = tasks.compare(paths.reference, paths.analysis_output, paths.comparison_output, runtime_config=runtime_cfg)
        status = 0 if result["passed"] else 1
    elif task == "full_chain":
        tasks.analyse_mc(paths.ao2d_filename, paths.analysis_output, draw, runtime_config=runtime_cfg)
        tasks.efficiency(paths.analysis_output, paths.efficiency_output, runtime_config=runtime_cfg)
        if paths.reference:
            result = tasks.compare(paths.reference, paths.analysis_output, paths.comparison_output, runtime_config=runtime_cfg)
            status = 0 if result["passed"] else 1
    LOGGER.info("Finished run task=%s elapsed_sec=%.2f", task, time.time() - t0)
    return status


def main() -> int:
    parser = argparse.ArgumentParser(description="Strangeness reconstruction QA on AO2D MC tables")
    parser.add_argument("--config", help="Path to TOML config")
    parser.add_argument("--dump-default-config", action="store_true", help="Print default config and exit")
    args = parser.parse_args()

    if args.dump_default_config:
        print(default_config())
        return 0
    if not args.config:
        parser.error("--config is required")

    with open(args.config, "rb") as f:
        cfg = tomllib.load(f)

    merged = s.merge_config(cfg)

    started = datetime.now(timezone.utc)
    status = "success"
    error = ""
    rc = 1
    try:
        rc = run(merged)
        if rc != 0:
            status = "failed"
            error = "QA comparison found incompatible histograms"
    except Exception as exc:
        status = "failed"
        error = str(exc)
        raise
    finally:
        ended = datetime.now(timezone.utc)
        metadata = {
            "status": status,
            "error": error,
            "started_utc": started.isoformat(),
            "ended_utc": ended.isoformat(),
            "duration_sec": (ended - started).total_seconds(),
            "git_revision": _git_revision(),
            "config": copy.deepcopy(merged),
        }
        try:
            try:
                metadata_path = s.current_runtime_config(merged).paths.metadata_output
            except ValueError:
                metadata_path = merged.get("paths", {}).get("metadata_output") or "run_metadata.json"
            _write_metadata(metadata_path, metadata)
        except OSError as meta_exc:
            LOGGER.error("Failed to write metadata: %s", meta_exc)
    return rc


if __name__ == "__main__":
    sys.exit(main())
