"""vendor 目录管理 - 列出和清理已拉取的依赖

目录结构: <vendor_dir>/<owner>/<repository>/
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any

from vendorkit.core.dep.manifest import find_manifest
from vendorkit.utils.shell import CommandExecutor, LocalExecutor

logger = logging.getLogger(__name__)


class VendorTree:
    """vendor 目录"""

    def __init__(self, vendor_dir: str | Path, executor: CommandExecutor | None = None) -> None:
        self.vendor_dir = Path(vendor_dir)
        self.executor = executor or LocalExecutor()

    def _checkouts(self) -> list[Path]:
        if not self.vendor_dir.is_dir():
            return []
        return [
            repo_dir
            for owner_dir in sorted(self.vendor_dir.iterdir()) if owner_dir.is_dir()
            for repo_dir in sorted(owner_dir.iterdir()) if repo_dir.is_dir()
        ]

    def list_vendored(self) -> list[dict[str, Any]]:
        """列出已拉取的依赖及其当前提交"""
        result: list[dict[str, Any]] = []
        for repo_dir in self._checkouts():
            is_git = (repo_dir / ".git").exists()
            result.append({
                "owner": repo_dir.parent.name,
                "repository": repo_dir.name,
                "path": str(repo_dir),
                "commit": self._commit(repo_dir) if is_git else "",
                "complete": is_git,
                "manifest": find_manifest(repo_dir) is not None,
            })
        return result

    def clean(self, owner: str | None = None, repository: str | None = None) -> int:
        """删除已拉取的依赖，返回删除的目录数

        不传参数时清空整个 vendor 目录；只传 owner 时删除该用户下全部仓库。
        """
        removed = 0
        for repo_dir in self._checkouts():
            if owner is not None and repo_dir.parent.name != owner:
                continue
            if repository is not None and repo_dir.name != repository:
                continue
            shutil.rmtree(repo_dir)
            removed += 1

        # 删除清理后留下的空 owner 目录
        if self.vendor_dir.is_dir():
            for owner_dir in self.vendor_dir.iterdir():
                if owner_dir.is_dir() and not any(owner_dir.iterdir()):
                    owner_dir.rmdir()

        logger.info("已清理 %d 个依赖目录: %s", removed, self.vendor_dir)
        return removed

    def _commit(self, repo_dir: Path) -> str:
        r = self.executor.execute(["git", "rev-parse", "HEAD"], cwd=str(repo_dir))
        return r.stdout.strip()[:12] if r.success else ""
