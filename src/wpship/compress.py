# compress.py
from __future__ import annotations

import os
import zipfile
from pathlib import Path


def zip_directory(src: str | Path, dest: str | Path, root_name: str | None = None) -> Path:
    """
    Zip everything under src into dest, with entries stored under
    root_name/ (defaults to src's directory name). WordPress expects the
    plugin slug as the single top-level directory of an install zip.

    Built in a temp file and renamed so a failed run leaves no partial zip.
    """
    src_p = Path(src).resolve()
    dest_p = Path(dest).resolve()
    if not src_p.is_dir():
        raise FileNotFoundError(f"Nothing to compress, build directory not found: {src_p}")

    root = root_name or src_p.name
    dest_p.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest_p.with_suffix(dest_p.suffix + ".tmp")

    try:
        with zipfile.ZipFile(tmp, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            # deterministic traversal
            for f in sorted(src_p.rglob("*")):
                if f.is_file() and f.resolve() != dest_p:
                    zf.write(f, arcname=f"{root}/{f.relative_to(src_p).as_posix()}")
        os.replace(tmp, dest_p)
    finally:
        if tmp.exists():
            tmp.unlink()

    return dest_p
