"""依赖仓库服务

- sources.py: git 拉取器（实现 DependencyFetcher 协议）
- workspace.py: vendor 目录列出与清理
"""

from vendorkit.services.repo.sources import GitFetcher
from vendorkit.services.repo.workspace import VendorTree

__all__ = [
    "GitFetcher",
    "VendorTree",
]
