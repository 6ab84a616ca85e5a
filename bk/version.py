from __future__ import annotations

import importlib.metadata
import json
import os
import subprocess
from pathlib import Path
from typing import NamedTuple, Optional

DISTRIBUTION = "bk-reader"


class BuildInfo(NamedTuple):
    commit: Optional[str]
    date: Optional[str]
    dirty: bool


def _run_git(args: list[str], cwd: Optional[str] = None) -> Optional[str]:
    try:
        out = subprocess.check_output(
            ["git", *args], cwd=cwd or os.getcwd(), stderr=subprocess.DEVNULL
        )
        return out.decode().strip() or None
    except (subprocess.CalledProcessError, FileNotFoundError, OSError):
        return None


def _from_git_repo() -> Optional[BuildInfo]:
    here = Path(__file__).resolve().parent
    root = _run_git(["rev-parse", "--show-toplevel"], cwd=str(here))
    if not root:
        return None

    commit = _run_git(["rev-parse", "HEAD"], cwd=root)
    date = _run_git(["show", "-s", "--format=%cI", "HEAD"], cwd=root)
    status = _run_git(["status", "--porcelain"], cwd=root)
    return BuildInfo(commit=commit, date=date, dirty=bool(status))


def _from_embedded_file() -> Optional[BuildInfo]:
    # Generated at build time by hatch build hook
    try:
        from . import _build_info  # type: ignore
    except ImportError:
        return None
    commit = getattr(_build_info, "COMMIT", None)
    date = getattr(_build_info, "DATE", None)
    if commit or date:
        return BuildInfo(commit=commit, date=date, dirty=False)
    return None


def _from_direct_url() -> Optional[BuildInfo]:
    # PEP 610 direct_url.json may contain VCS commit id when installed from VCS
    try:
        dist = importlib.metadata.distribution(DISTRIBUTION)
        text = dist.read_text("direct_url.json")
    except importlib.metadata.PackageNotFoundError:
        return None
    if not text:
        return None
    try:
        commit = (json.loads(text).get("vcs_info") or {}).get("commit_id")
    except (ValueError, AttributeError):
        return None
    return BuildInfo(commit=commit, date=None, dirty=False) if commit else None


def get_build_info() -> BuildInfo:
    # Priority: live git repo -> embedded file -> direct_url.json -> unknowns
    for getter in (_from_git_repo, _from_embedded_file, _from_direct_url):
        info = getter()
        if info and (info.commit or info.date):
            return info
    return BuildInfo(commit=None, date=None, dirty=False)


def get_package_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def get_version_string() -> str:
    """'bk VERSION (COMMIT DATE)', with short hashes and a -dirty marker."""
    info = get_build_info()
    dirty_suffix = "-dirty" if info.dirty else ""
    commit = info.commit[:7] if info.commit else "unknown"
    date = info.date or "unknown"
    return f"bk {get_package_version()} ({commit}{dirty_suffix} {date})"
