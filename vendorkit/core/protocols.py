"""领域协议定义

解析器只依赖这里的协议，不依赖 git 等具体实现。
使用 typing.Protocol 而非 ABC，实现类无需继承。
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from vendorkit.core.dep.identity import DependencyIdentity
    from vendorkit.core.dep.models import CheckoutResult


class DependencyFetcher(Protocol):
    """拉取并检出依赖的能力

    约定:
      - 检出到 vendor_dir/<owner>/<repository>
      - 本地已是目标版本时重复调用是幂等的
      - 不同标识可以并发调用
      - 失败时抛异常，由解析器包装为 FetchError
    """

    def fetch(self, vendor_dir: Path, identity: DependencyIdentity) -> CheckoutResult:
        """检出 identity 指定的版本并返回实际 commit"""
        ...
