"""ServiceContainer 单元测试"""

from __future__ import annotations

from pathlib import Path

import pytest

import vendorkit.core.config as cfgmod
from vendorkit.core.dep.resolver import DependencyResolver
from vendorkit.services.container import (
    ServiceContainer,
    get_container,
    reset_container,
)
from vendorkit.services.repo.sources import GitFetcher
from vendorkit.utils.shell import LocalExecutor


@pytest.fixture(autouse=True)
def _setup_config(monkeypatch: pytest.MonkeyPatch):
    cfg = cfgmod.Config(host="git.example.com", vendor_dir_name="vendor", max_workers=3, git_timeout=30)
    monkeypatch.setattr(cfgmod, "_current", cfg)
    reset_container()
    yield
    reset_container()


class TestServiceContainer:
    def test_lazy_loading(self) -> None:
        c = ServiceContainer()
        assert len(c._instances) == 0
        _ = c.resolver
        assert set(c._instances) == {"executor", "fetcher", "resolver"}

    def test_shared_instances(self) -> None:
        c = ServiceContainer()
        assert c.resolver is c.resolver
        assert c.resolver.fetcher is c.fetcher
        assert c.fetcher.executor is c.executor

    def test_built_from_config(self) -> None:
        c = ServiceContainer()
        assert isinstance(c.executor, LocalExecutor)
        assert isinstance(c.fetcher, GitFetcher)
        assert c.fetcher.host == "git.example.com"
        assert c.fetcher.timeout == 30
        assert isinstance(c.resolver, DependencyResolver)
        assert c.resolver.vendor_dir_name == "vendor"
        assert c.resolver.max_workers == 3

    def test_explicit_config(self) -> None:
        c = ServiceContainer(config=cfgmod.Config(host="other.org"))
        assert c.fetcher.host == "other.org"

    def test_vendor_tree_per_package(self, tmp_path: Path) -> None:
        tree = ServiceContainer().vendor_tree(tmp_path)
        assert tree.vendor_dir == tmp_path / "vendor"


class TestGlobalContainer:
    def test_singleton_and_reset(self) -> None:
        first = get_container()
        assert get_container() is first
        reset_container()
        assert get_container() is not first
