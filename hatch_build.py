"""Hatchling build hook that records the git commit in the package."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

from hatchling.builders.hooks.plugin.interface import BuildHookInterface


class CustomBuildHook(BuildHookInterface):
    """Writes bk/_build_info.py so installed copies can report their commit."""

    def initialize(self, version: str, build_data: dict[str, Any]) -> None:
        self._write_build_info(Path(self.root))
        build_data.setdefault("artifacts", []).append("bk/_build_info.py")

    def _write_build_info(self, project_root: Path) -> None:
        commit = self._run_git(["rev-parse", "HEAD"], cwd=project_root)
        date = self._run_git(["show", "-s", "--format=%cI", "HEAD"], cwd=project_root)
        content = (
            "# Auto-generated at build time.\n"
            f"COMMIT = {commit!r}\n"
            f"DATE = {date!r}\n"
        )
        (project_root / "bk" / "_build_info.py").write_text(content, encoding="utf-8")

    def _run_git(self, args: list[str], cwd: Path) -> str | None:
        try:
            out = subprocess.check_output(["git", *args], cwd=str(cwd), stderr=subprocess.DEVNULL)
            return out.decode().strip() or None
        except (subprocess.CalledProcessError, FileNotFoundError, OSError):
            # Building outside a git checkout records unknown commit/date
            return None
