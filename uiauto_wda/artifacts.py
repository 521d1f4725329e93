# uiauto_wda/artifacts.py
"""
Failure artifacts: the last page source seen by a resolution that timed out.
"""
from __future__ import annotations
import logging
import os
import re
import time
from typing import Dict, Optional

log = logging.getLogger("uiauto_wda")


def _ts() -> str:
    """Generate timestamp string for file naming."""
    return time.strftime("%Y%m%d_%H%M%S")


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def _safe_prefix(prefix: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", prefix).strip("_")[:80] or "element"


def make_artifacts(out_dir: Optional[str], prefix: str, page_source: Optional[str]) -> Dict[str, str]:
    """
    Write the page source snapshot to out_dir.

    @param out_dir Output directory; nothing is written when None
    @param prefix File prefix, sanitized for the filesystem
    @param page_source Raw page source XML of the last attempt
    @return Dict of artifact types to file paths
    """
    artifacts: Dict[str, str] = {}
    if not out_dir or not page_source:
        return artifacts

    path = os.path.join(out_dir, f"{_safe_prefix(prefix)}_{_ts()}_source.xml")
    try:
        ensure_dir(out_dir)
        with open(path, "w", encoding="utf-8") as f:
            f.write(page_source)
        artifacts["page_source"] = path
    except OSError as e:
        log.warning("Could not write page source artifact %s: %s", path, e)
    return artifacts
