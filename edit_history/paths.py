# edit_history/paths.py
import os, json, re, random, string
from datetime import datetime

from .archive import EDIT_HISTORY_FILE_EXT

RUNS_ROOT = os.path.join("outputs", "history_runs")


def normalize_path(path: str) -> str:
    """Forward slashes, no duplicate or trailing separators, no leading './'."""
    path = path.replace("\\", "/")
    path = re.sub(r"/+", "/", path)
    while path.startswith("./"):
        path = path[2:]
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def archive_path_for(doc_path: str, root_folder: str = "") -> str:
    """
    Archive for a document: alongside it when root_folder is empty, otherwise
    mirrored under root_folder.
    """
    doc = normalize_path(doc_path)
    if not root_folder:
        return doc + EDIT_HISTORY_FILE_EXT
    root = normalize_path(root_folder)
    if os.path.isabs(doc):
        # Mirror absolute documents by dropping the anchor
        drive, rest = os.path.splitdrive(doc)
        doc = (drive.replace(":", "") + rest).lstrip("/")
    return normalize_path(root + "/" + doc + EDIT_HISTORY_FILE_EXT)


def _safe(name: str) -> str:
    name = name.strip().replace("\\", "/")
    name = name.split("/")[-1]
    name = re.sub(r'[^a-zA-Z0-9._\- ]+', "_", name)
    return name[:80] if name else "document"


def new_run_id() -> str:
    ts = datetime.utcnow().strftime("%Y-%m-%d_%H-%M-%S")
    suf = "".join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return f"{ts}_{suf}"


def ensure_run_dirs(doc_path: str, run_id: str | None = None, runs_root: str | None = None):
    """
    Create and return a run directory (and subfolders) for exports of one document.
    """
    label_safe = _safe(os.path.basename(doc_path) or "document")
    rid = run_id or new_run_id()
    base = os.path.join(runs_root or RUNS_ROOT, label_safe, rid)
    os.makedirs(base, exist_ok=True)
    sub = {
        "csv": os.path.join(base, "csv"),
        "viz": os.path.join(base, "viz"),
    }
    for p in sub.values():
        os.makedirs(p, exist_ok=True)

    # write meta.json if not present
    meta_path = os.path.join(base, "meta.json")
    if not os.path.exists(meta_path):
        with open(meta_path, "w", encoding="utf-8") as f:
            json.dump({
                "document": doc_path,
                "label_safe": label_safe,
                "run_id": rid,
                "created_utc": datetime.utcnow().isoformat()
            }, f, indent=2)
    return base, sub


def update_meta(run_base: str, **fields):
    meta_path = os.path.join(run_base, "meta.json")
    try:
        with open(meta_path, "r", encoding="utf-8") as f:
            meta = json.load(f)
    except (OSError, ValueError):
        meta = {}
    meta.update(fields)
    with open(meta_path, "w", encoding="utf-8") as f:
        json.dump(meta, f, indent=2, ensure_ascii=False)
