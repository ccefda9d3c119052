"""Git 拉取器 - 把依赖仓库克隆/更新到 vendor 目录并检出指定版本

检出规则:
  1. 目标目录不存在 → 完整 clone（需要全部标签和历史才能按 SHA 检出）
  2. 目录存在但没有 .git（上次中途失败留下的）→ 删除后重新 clone
  3. 已检出且 HEAD 正是所需标签/提交 → 不访问网络，直接返回
  4. 否则 git fetch --tags 更新后再检出
版本优先匹配同名标签，其次当作提交 SHA，为空时检出默认分支最新提交。
"""

from __future__ import annotations

import logging
import re
import shutil
import threading
from pathlib import Path

from vendorkit.core.dep.identity import DependencyIdentity
from vendorkit.core.dep.manifest import canonical_url
from vendorkit.core.dep.models import CheckoutResult
from vendorkit.core.exceptions import DependencyError, ValidationError
from vendorkit.utils.shell import CommandExecutor, CommandResult, LocalExecutor

logger = logging.getLogger(__name__)

_SAFE_REF_RE = re.compile(r"^[a-zA-Z0-9_./\-]+$")
_SHA_RE = re.compile(r"^[0-9a-fA-F]{4,40}$")


class GitFetcher:
    """基于 git 命令行的依赖拉取器"""

    def __init__(
        self,
        host: str = "github.com",
        executor: CommandExecutor | None = None,
        timeout: int | None = 600,
    ) -> None:
        self.host = host
        self.executor = executor or LocalExecutor()
        self.timeout = timeout
        self._locks: dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def fetch(self, vendor_dir: Path, identity: DependencyIdentity) -> CheckoutResult:
        """检出 identity 到 vendor_dir/<owner>/<repository>"""
        if identity.version and not _SAFE_REF_RE.match(identity.version):
            raise ValidationError(f"版本包含非法字符: {identity.version}")

        dest = Path(vendor_dir) / identity.owner / identity.repository
        with self._lock_for(dest):
            return self._fetch_locked(dest, identity)

    def _lock_for(self, dest: Path) -> threading.Lock:
        key = dest.resolve()
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())

    def _fetch_locked(self, dest: Path, identity: DependencyIdentity) -> CheckoutResult:
        if dest.exists() and not (dest / ".git").exists():
            logger.warning("清理未完成的检出目录: %s", dest)
            shutil.rmtree(dest)

        if not dest.exists():
            self._clone(canonical_url(identity.owner, identity.repository, self.host), dest)
        elif identity.version and self._is_at(dest, identity.version):
            logger.info("已是目标版本，跳过更新: %s", identity)
            return CheckoutResult(path=dest, commit=self._head(dest), ref=identity.version)
        else:
            logger.info("更新仓库: %s", identity)
            self._git(["fetch", "--tags", "--force", "origin"], cwd=dest, label="git fetch")

        ref = self._checkout(dest, identity)
        return CheckoutResult(path=dest, commit=self._head(dest), ref=ref)

    def _clone(self, url: str, dest: Path) -> None:
        logger.info("克隆仓库: %s -> %s", url, dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        r = self._run(["clone", url, str(dest)], cwd=dest.parent)
        if not r.success:
            shutil.rmtree(dest, ignore_errors=True)
            raise DependencyError(f"git clone 失败 (rc={r.returncode}): {r.stderr[:300]}")

    def _checkout(self, dest: Path, identity: DependencyIdentity) -> str:
        """检出版本，返回命中的标签名或提交 SHA"""
        if not identity.version:
            self._git(["checkout", "--force", "--detach", "origin/HEAD"], cwd=dest, label="git checkout")
            return self._head(dest)

        found = self._lookup(dest, identity.version)
        if found is None:
            raise DependencyError(
                f"版本 '{identity.version}' 在 {identity.owner}/{identity.repository} "
                "中既不是标签也不是提交"
            )
        sha, is_tag = found
        self._git(["checkout", "--force", "--detach", sha], cwd=dest, label="git checkout")
        return identity.version if is_tag else sha

    def _lookup(self, dest: Path, version: str) -> tuple[str, bool] | None:
        """解析版本: 标签优先，其次提交 SHA；返回 (sha, 是否标签)"""
        r = self._run(["rev-parse", "--verify", "--quiet", f"refs/tags/{version}^{{commit}}"], cwd=dest)
        if r.success:
            return r.stdout.strip(), True
        if _SHA_RE.match(version):
            r = self._run(["rev-parse", "--verify", "--quiet", f"{version}^{{commit}}"], cwd=dest)
            if r.success:
                return r.stdout.strip(), False
        return None

    def _is_at(self, dest: Path, version: str) -> bool:
        found = self._lookup(dest, version)
        if found is None:
            return False
        head = self._run(["rev-parse", "HEAD"], cwd=dest)
        return head.success and head.stdout.strip() == found[0]

    def _head(self, dest: Path) -> str:
        return self._git(["rev-parse", "HEAD"], cwd=dest, label="git rev-parse").stdout.strip()

    def _git(self, args: list[str], *, cwd: Path, label: str) -> CommandResult:
        r = self._run(args, cwd=cwd)
        if not r.success:
            raise DependencyError(f"{label} 失败 (rc={r.returncode}): {r.stderr[:300]}")
        return r

    def _run(self, args: list[str], *, cwd: Path) -> CommandResult:
        return self.executor.execute(["git", *args], cwd=str(cwd), timeout=self.timeout)
