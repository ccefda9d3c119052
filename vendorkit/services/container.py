"""服务容器 - 按同一份 Config 懒加载拉取器和解析器

用法:
    container = ServiceContainer()
    container.resolver.ensure_dependencies(manifest)

    cfg = Config.from_file("my_config.yml")
    container = ServiceContainer(config=cfg)
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vendorkit.core.config import Config
    from vendorkit.core.dep.resolver import DependencyResolver
    from vendorkit.services.repo.sources import GitFetcher
    from vendorkit.services.repo.workspace import VendorTree
    from vendorkit.utils.shell import CommandExecutor


class ServiceContainer:
    """懒加载服务容器，同一容器内实例共享"""

    def __init__(self, config: Config | None = None) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from vendorkit.core.config import get_config
            config = get_config()
        self._config = config

    @property
    def config(self) -> Config:
        return self._config

    @property
    def executor(self) -> CommandExecutor:
        if "executor" not in self._instances:
            from vendorkit.utils.shell import LocalExecutor
            self._instances["executor"] = LocalExecutor()
        return self._instances["executor"]  # type: ignore[return-value]

    @property
    def fetcher(self) -> GitFetcher:
        if "fetcher" not in self._instances:
            from vendorkit.services.repo.sources import GitFetcher
            self._instances["fetcher"] = GitFetcher(
                host=self._config.host,
                executor=self.executor,
                timeout=self._config.git_timeout,
            )
        return self._instances["fetcher"]  # type: ignore[return-value]

    @property
    def resolver(self) -> DependencyResolver:
        if "resolver" not in self._instances:
            from vendorkit.core.dep.resolver import DependencyResolver
            self._instances["resolver"] = DependencyResolver(
                self.fetcher,
                vendor_dir_name=self._config.vendor_dir_name,
                max_workers=self._config.max_workers,
            )
        return self._instances["resolver"]  # type: ignore[return-value]

    def vendor_tree(self, package_dir: str | Path) -> VendorTree:
        """包目录对应的 vendor 目录（不缓存，每个包各自一份）"""
        from vendorkit.services.repo.workspace import VendorTree
        return VendorTree(Path(package_dir) / self._config.vendor_dir_name, executor=self.executor)


_container: ServiceContainer | None = None
_container_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局容器（线程安全的懒初始化）"""
    global _container  # noqa: PLW0603
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """重置全局容器（CLI 切换配置文件后调用）"""
    global _container  # noqa: PLW0603
    with _container_lock:
        _container = None
