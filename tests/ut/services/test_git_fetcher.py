"""GitFetcher 单元测试 - 通过假执行器模拟 git，不访问网络"""

from __future__ import annotations

from pathlib import Path

import pytest

from vendorkit.core.dep.identity import DependencyIdentity, parse_reference
from vendorkit.core.exceptions import DependencyError, ValidationError
from vendorkit.services.repo.sources import GitFetcher
from vendorkit.utils.shell import CommandResult

SHA_V1 = "1" * 40
SHA_V2 = "2" * 40
SHA_TIP = "f" * 40


class FakeGit:
    """记录命令并模拟最小的 git 行为"""

    def __init__(
        self,
        tags: dict[str, str] | None = None,
        commits: list[str] | None = None,
        head: str = "",
        fail: set[str] | None = None,
    ) -> None:
        self.tags = tags or {}
        self.commits = commits or []
        self.head = head
        self.fail = fail or set()
        self.commands: list[list[str]] = []

    @staticmethod
    def _ok(out: str = "") -> CommandResult:
        return CommandResult(returncode=0, stdout=out + "\n", stderr="")

    @staticmethod
    def _err(msg: str = "fatal") -> CommandResult:
        return CommandResult(returncode=128, stdout="", stderr=msg)

    def execute(self, cmd: list[str], *, cwd: str = ".", timeout: int | None = None) -> CommandResult:
        self.commands.append(cmd)
        sub = cmd[1]
        if sub in self.fail:
            return self._err(f"fatal: {sub} failed")
        if sub == "clone":
            (Path(cmd[3]) / ".git").mkdir(parents=True)
            return self._ok()
        if sub == "fetch":
            return self._ok()
        if sub == "checkout":
            target = cmd[-1]
            self.head = SHA_TIP if target == "origin/HEAD" else target
            return self._ok()
        if sub == "rev-parse":
            target = cmd[-1]
            if target == "HEAD":
                return self._ok(self.head) if self.head else self._err()
            target = target.removesuffix("^{commit}")
            if target.startswith("refs/tags/"):
                sha = self.tags.get(target[len("refs/tags/"):])
                return self._ok(sha) if sha else self._err()
            for c in self.commits:
                if c.startswith(target):
                    return self._ok(c)
            return self._err()
        return self._err(f"unexpected: {cmd}")

    def subcommands(self) -> list[str]:
        return [c[1] for c in self.commands]


def _dest(vendor: Path, ident: DependencyIdentity) -> Path:
    return vendor / ident.owner / ident.repository


class TestFreshClone:
    def test_clone_and_checkout_tag(self, tmp_path: Path) -> None:
        git = FakeGit(tags={"v1.0": SHA_V1})
        ident = parse_reference("owner/lib@v1.0")
        result = GitFetcher(executor=git).fetch(tmp_path, ident)

        dest = _dest(tmp_path, ident)
        assert result.path == dest
        assert result.commit == SHA_V1
        assert result.ref == "v1.0"
        assert git.commands[0] == ["git", "clone", "https://github.com/owner/lib", str(dest)]
        assert "fetch" not in git.subcommands()
        assert ["git", "checkout", "--force", "--detach", SHA_V1] in git.commands

    def test_commit_sha_fallback(self, tmp_path: Path) -> None:
        full = "abc1234" + "0" * 33
        git = FakeGit(commits=[full])
        result = GitFetcher(executor=git).fetch(tmp_path, parse_reference("owner/lib@abc1234"))
        assert result.commit == full
        assert result.ref == full

    def test_tag_preferred_over_sha(self, tmp_path: Path) -> None:
        git = FakeGit(tags={"abcdef": SHA_V1}, commits=["abcdef" + "0" * 34])
        result = GitFetcher(executor=git).fetch(tmp_path, parse_reference("owner/lib@abcdef"))
        assert result.commit == SHA_V1
        assert result.ref == "abcdef"

    def test_empty_version_uses_default_branch_tip(self, tmp_path: Path) -> None:
        git = FakeGit()
        result = GitFetcher(executor=git).fetch(tmp_path, parse_reference("owner/lib"))
        assert ["git", "checkout", "--force", "--detach", "origin/HEAD"] in git.commands
        assert result.commit == SHA_TIP
        assert result.ref == SHA_TIP

    def test_unknown_version(self, tmp_path: Path) -> None:
        git = FakeGit(tags={"v1.0": SHA_V1})
        with pytest.raises(DependencyError, match="既不是标签也不是提交"):
            GitFetcher(executor=git).fetch(tmp_path, parse_reference("owner/lib@v9.9"))

    def test_custom_host(self, tmp_path: Path) -> None:
        git = FakeGit()
        GitFetcher(host="git.example.com", executor=git).fetch(tmp_path, parse_reference("o/r"))
        assert git.commands[0][2] == "https://git.example.com/o/r"

    def test_clone_failure_cleans_up(self, tmp_path: Path) -> None:
        git = FakeGit(fail={"clone"})
        ident = parse_reference("owner/missing")
        with pytest.raises(DependencyError, match="git clone 失败"):
            GitFetcher(executor=git).fetch(tmp_path, ident)
        assert not _dest(tmp_path, ident).exists()

    def test_unsafe_version_rejected(self, tmp_path: Path) -> None:
        git = FakeGit()
        with pytest.raises(ValidationError, match="非法字符"):
            GitFetcher(executor=git).fetch(tmp_path, DependencyIdentity("o", "r", version="v1;rm"))
        assert git.commands == []


class TestExistingCheckout:
    def test_already_at_version_skips_network(self, tmp_path: Path) -> None:
        ident = parse_reference("owner/lib@v1.0")
        (_dest(tmp_path, ident) / ".git").mkdir(parents=True)
        git = FakeGit(tags={"v1.0": SHA_V1}, head=SHA_V1)

        result = GitFetcher(executor=git).fetch(tmp_path, ident)

        assert result.commit == SHA_V1
        assert set(git.subcommands()) == {"rev-parse"}

    def test_other_version_fetches_then_checks_out(self, tmp_path: Path) -> None:
        ident = parse_reference("owner/lib@v2.0")
        (_dest(tmp_path, ident) / ".git").mkdir(parents=True)
        git = FakeGit(tags={"v1.0": SHA_V1, "v2.0": SHA_V2}, head=SHA_V1)

        result = GitFetcher(executor=git).fetch(tmp_path, ident)

        assert "clone" not in git.subcommands()
        assert ["git", "fetch", "--tags", "--force", "origin"] in git.commands
        assert result.commit == SHA_V2

    def test_tip_always_fetches(self, tmp_path: Path) -> None:
        ident = parse_reference("owner/lib")
        (_dest(tmp_path, ident) / ".git").mkdir(parents=True)
        git = FakeGit(head=SHA_V1)
        GitFetcher(executor=git).fetch(tmp_path, ident)
        assert "fetch" in git.subcommands()

    def test_fetch_failure_raises(self, tmp_path: Path) -> None:
        ident = parse_reference("owner/lib")
        (_dest(tmp_path, ident) / ".git").mkdir(parents=True)
        git = FakeGit(fail={"fetch"})
        with pytest.raises(DependencyError, match="git fetch"):
            GitFetcher(executor=git).fetch(tmp_path, ident)

    def test_half_fetched_directory_recloned(self, tmp_path: Path) -> None:
        ident = parse_reference("owner/lib@v1.0")
        dest = _dest(tmp_path, ident)
        dest.mkdir(parents=True)
        (dest / "partial.inc").write_text("x", encoding="utf-8")
        git = FakeGit(tags={"v1.0": SHA_V1})

        result = GitFetcher(executor=git).fetch(tmp_path, ident)

        assert git.subcommands()[0] == "clone"
        assert not (dest / "partial.inc").exists()
        assert result.commit == SHA_V1
