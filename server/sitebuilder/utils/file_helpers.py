import io
import os
import zipfile
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from ..core.reconcile import CanonicalFile


# --- Helper: safe path normalize & reject traversal/abs paths ---
def _safe_normalize(p: str) -> Optional[str]:
    if not isinstance(p, str) or p.strip() == "":
        return None
    p = p.replace("\\", "/")
    # disallow absolute paths
    if os.path.isabs(p) or p.startswith("/"):
        return None
    clean = os.path.normpath(p).replace("\\", "/")
    if clean == ".." or clean.startswith("../") or "/../" in clean or clean == ".":
        return None
    while clean.startswith("./"):
        clean = clean[2:]
    return clean


def project_archive_name(today: Optional[date] = None) -> str:
    return f"project-{(today or date.today()).isoformat()}.zip"


def build_project_zip(files: Iterable[CanonicalFile]) -> bytes:
    """
    Zip every file with a usable name and non-empty content. Entries whose
    name would escape the archive root are skipped.
    """
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for f in files:
            if not f.name or not f.content:
                continue
            arcname = _safe_normalize(f.name)
            if arcname is None:
                continue
            zf.writestr(arcname, f.content)
    return buf.getvalue()


def write_project_zip(files: Iterable[CanonicalFile], out_dir: str = ".") -> Path:
    target = Path(out_dir) / project_archive_name()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(build_project_zip(files))
    return target


def write_file(f: CanonicalFile, out_dir: str = ".") -> Optional[Path]:
    rel = _safe_normalize(f.name)
    if rel is None:
        return None
    target = Path(out_dir) / rel
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(f.content, encoding="utf-8")
    return target
