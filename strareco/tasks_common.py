from typing import Any


def collect_rresult_ptrs(obj: Any) -> list[Any]:
    out: list[Any] = []
    if isinstance(obj, dict):
        for value in obj.values():
            out.extend(collect_rresult_ptrs(value))
        return out
    if isinstance(obj, (list, tuple)):
        for value in obj:
            out.extend(collect_rresult_ptrs(value))
        return out
    if hasattr(obj, "GetValue") and hasattr(obj, "GetPtr"):
        out.append(obj)
    return out


def run_graphs(actions: list[Any]) -> None:
    if not actions:
        return
    import ROOT

    run_graphs_impl = getattr(getattr(ROOT, "RDF", None), "RunGraphs", None)
    if run_graphs_impl:
        run_graphs_impl(actions)
        return
    # Fallback for ROOT builds without RunGraphs.
    for action in actions:
        action.GetValue()


def collect_histograms(tdir: Any, prefix: str = "") -> dict[str, Any]:
    """Detached clones of every histogram below ``tdir``, keyed by path."""
    out: dict[str, Any] = {}
    for key in tdir.GetListOfKeys():
        name = str(key.GetName())
        obj = key.ReadObj()
        path = f"{prefix}/{name}" if prefix else name
        if obj.InheritsFrom("TDirectory"):
            out.update(collect_histograms(obj, path))
        elif obj.InheritsFrom("TH1"):
            # Detach from the file so the clone outlives it in PyROOT.
            clone = obj.Clone(f"{obj.GetName()}__cmp")
            clone.SetDirectory(0)
            out[path] = clone
    return out


def fill_counter(hist: Any, counts: list[int], labels: tuple[str, ...] | list[str] = ()) -> None:
    for i, count in enumerate(counts):
        hist.SetBinContent(i + 1, float(count))
        hist.SetBinError(i + 1, float(count) ** 0.5)
    for i, label in enumerate(labels):
        hist.GetXaxis().SetBinLabel(i + 1, str(label))
    hist.SetEntries(float(sum(counts)))
