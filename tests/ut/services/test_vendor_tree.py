"""VendorTree 单元测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from vendorkit.services.repo.workspace import VendorTree
from vendorkit.utils.shell import CommandResult


class StubExecutor:
    def __init__(self, head: str) -> None:
        self.head = head

    def execute(self, cmd: list[str], *, cwd: str = ".", timeout: int | None = None) -> CommandResult:
        return CommandResult(returncode=0, stdout=self.head + "\n", stderr="")


@pytest.fixture()
def vendor(tmp_path: Path) -> Path:
    root = tmp_path / "dependencies"
    (root / "a" / "x" / ".git").mkdir(parents=True)
    (root / "a" / "y").mkdir(parents=True)
    (root / "b" / "z" / ".git").mkdir(parents=True)
    (root / "b" / "z" / "vendorkit.json").write_text("{}", encoding="utf-8")
    (root / "stray.txt").write_text("", encoding="utf-8")
    return root


class TestListVendored:
    def test_lists_checkouts(self, vendor: Path) -> None:
        tree = VendorTree(vendor, executor=StubExecutor("0123456789abcdef0123"))
        entries = tree.list_vendored()

        assert [(e["owner"], e["repository"]) for e in entries] == [("a", "x"), ("a", "y"), ("b", "z")]
        assert entries[0]["commit"] == "0123456789ab"
        assert entries[1]["complete"] is False
        assert entries[1]["commit"] == ""
        assert entries[2]["manifest"] is True
        assert entries[0]["manifest"] is False

    def test_missing_vendor_dir(self, tmp_path: Path) -> None:
        assert VendorTree(tmp_path / "nothing").list_vendored() == []


class TestClean:
    def test_clean_owner(self, vendor: Path) -> None:
        assert VendorTree(vendor).clean(owner="a") == 2
        assert not (vendor / "a").exists()
        assert (vendor / "b" / "z").exists()

    def test_clean_single(self, vendor: Path) -> None:
        assert VendorTree(vendor).clean(owner="a", repository="y") == 1
        assert (vendor / "a" / "x").exists()

    def test_clean_all(self, vendor: Path) -> None:
        assert VendorTree(vendor).clean() == 3
        assert [p.name for p in vendor.iterdir()] == ["stray.txt"]
