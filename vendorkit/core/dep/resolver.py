"""依赖解析器

从根包清单出发，深度优先地把每个声明的依赖拉取到 vendor 目录，
加载依赖自身的清单并继续递归，直到所有可达依赖都已就绪。

规则:
  - vendor 目录固定为 <根包目录>/dependencies，嵌套依赖共用同一目录
  - 解析键相同的依赖只拉取一次（菱形依赖），再次遇到直接跳过（循环依赖）
  - 任一引用解析失败或拉取失败都会中止整个解析，不返回部分成功
  - 依赖没有自己的清单是合法的，该分支到此结束
  - 闭包顺序: 父先于子，同级按声明顺序

max_workers > 1 时同级依赖的拉取提交到线程池并发执行，
遍历本身仍在调用线程中按声明顺序进行，因此闭包顺序与串行模式一致。
"""

from __future__ import annotations

import logging
import subprocess
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path

from vendorkit.core.dep.identity import DependencyIdentity, ResolutionKey, parse_reference
from vendorkit.core.dep.manifest import PackageManifest
from vendorkit.core.dep.models import CheckoutResult
from vendorkit.core.exceptions import (
    FetchError,
    NotALocalPackageError,
    ResolutionError,
    VendorKitError,
)
from vendorkit.core.protocols import DependencyFetcher

logger = logging.getLogger(__name__)

# 拉取器可能抛出的异常，统一包装为 FetchError
_FETCH_ERRORS = (VendorKitError, OSError, subprocess.SubprocessError, ValueError)


@dataclass
class ResolutionContext:
    """单次 ensure_dependencies 调用的解析状态

    作为参数显式传给每一层递归，不同调用之间互不影响。
    """

    vendor_dir: Path
    closure: list[DependencyIdentity] = field(default_factory=list)
    pool: ThreadPoolExecutor | None = None
    _visited: set[ResolutionKey] = field(default_factory=set)
    _locations: dict[tuple[str, str], ResolutionKey] = field(default_factory=dict)
    _pending: dict[ResolutionKey, Future[CheckoutResult]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def claim(self, identity: DependencyIdentity) -> bool:
        """标记为已访问；已访问过返回 False"""
        with self._lock:
            if identity.key in self._visited:
                return False
            self._visited.add(identity.key)
            previous = self._locations.get(identity.location)
            if previous is not None and previous != identity.key:
                logger.warning(
                    "版本不一致: %s/%s 已按 %s 检出，将被 %s 覆盖",
                    identity.owner, identity.repository,
                    _key_text(previous), identity,
                    extra={"dependency": identity},
                )
            self._locations[identity.location] = identity.key
            return True

    def prefetch(
        self, identity: DependencyIdentity, fetch: Callable[[], CheckoutResult],
    ) -> None:
        """提前把拉取提交到线程池

        同一解析键最多一个在途拉取；同一目录已被其他版本占用时不预取，
        留到遍历时按顺序串行拉取。
        """
        if self.pool is None:
            return
        with self._lock:
            key = identity.key
            if key in self._visited or key in self._pending:
                return
            taken = self._locations.get(identity.location)
            if taken is not None and taken != key:
                return
            if any(k[:2] == identity.location for k in self._pending):
                return
            self._pending[key] = self.pool.submit(fetch)

    def take_pending(self, identity: DependencyIdentity) -> Future[CheckoutResult] | None:
        with self._lock:
            return self._pending.pop(identity.key, None)

    def supersede(self, identity: DependencyIdentity) -> list[Future[CheckoutResult]]:
        """取出同一目录下其他版本的在途预取

        这些预取结果会被 identity 的检出覆盖，不能再复用；
        对应版本之后轮到时按遍历顺序重新拉取。
        """
        with self._lock:
            stale = [
                k for k in self._pending
                if k[:2] == identity.location and k != identity.key
            ]
            return [self._pending.pop(k) for k in stale]


def _key_text(key: ResolutionKey) -> str:
    owner, repository, subpath, version = key
    return str(DependencyIdentity(owner, repository, subpath, version))


class DependencyResolver:
    """依赖解析器"""

    def __init__(
        self,
        fetcher: DependencyFetcher,
        *,
        vendor_dir_name: str = "dependencies",
        max_workers: int = 1,
    ) -> None:
        self.fetcher = fetcher
        self.vendor_dir_name = vendor_dir_name
        self.max_workers = max(1, max_workers)

    def ensure_dependencies(self, root: PackageManifest) -> list[DependencyIdentity]:
        """确保根包的全部依赖已拉取到 vendor 目录

        返回去重后的传递闭包，同时写入 root.all_dependencies。

        异常:
            NotALocalPackageError: root 不是根包或本地目录不存在
            MalformedReferenceError: 根包声明的依赖引用无效
            FetchError: 根包直接依赖拉取失败
            ResolutionError: 嵌套依赖中的任何失败，消息包含依赖路径
        """
        if not root.is_root:
            raise NotALocalPackageError(f"{root} 不是正在开发的根包，不能解析依赖")
        if root.local_path is None:
            raise NotALocalPackageError(f"{root} 没有本地目录")
        local = Path(root.local_path)
        if not local.is_dir():
            raise NotALocalPackageError(f"{root} 的本地目录不存在: {local}")

        vendor_dir = local / self.vendor_dir_name
        root.vendor_path = vendor_dir
        root.all_dependencies = []

        pool = ThreadPoolExecutor(max_workers=self.max_workers) if self.max_workers > 1 else None
        ctx = ResolutionContext(vendor_dir=vendor_dir, closure=root.all_dependencies, pool=pool)
        logger.info("开始解析依赖: %s -> %s", root, vendor_dir)
        try:
            self._resolve(root, ctx)
        finally:
            if pool is not None:
                pool.shutdown(wait=True, cancel_futures=True)

        logger.info("依赖解析完成: %d 个依赖", len(ctx.closure))
        return ctx.closure

    def _resolve(self, manifest: PackageManifest, ctx: ResolutionContext) -> None:
        identities = [parse_reference(ref) for ref in manifest.dependencies]

        for identity in identities:
            ctx.prefetch(identity, lambda ident=identity: self.fetcher.fetch(ctx.vendor_dir, ident))

        for identity in identities:
            if not ctx.claim(identity):
                logger.debug("已解析，跳过: %s", identity, extra={"dependency": identity})
                continue
            result = self._fetch(identity, ctx)
            resolved = identity.with_commit(result.commit)
            ctx.closure.append(resolved)
            self._descend(resolved, result, ctx)

    def _fetch(self, identity: DependencyIdentity, ctx: ResolutionContext) -> CheckoutResult:
        # 同目录其他版本的预取先落盘，当前版本最后检出
        wait(ctx.supersede(identity))
        future = ctx.take_pending(identity)
        try:
            if future is not None:
                result = future.result()
            else:
                result = self.fetcher.fetch(ctx.vendor_dir, identity)
        except _FETCH_ERRORS as e:
            logger.error("拉取失败: %s: %s", identity, e, extra={"dependency": identity})
            raise FetchError(identity, e) from e
        logger.info(
            "依赖就绪: %s -> %s (%s)", identity, result.path, result.ref or result.commit,
            extra={"dependency": identity},
        )
        return result

    def _descend(
        self, identity: DependencyIdentity, result: CheckoutResult, ctx: ResolutionContext,
    ) -> None:
        """加载已检出依赖的清单并递归解析其依赖"""
        try:
            nested = PackageManifest.load(result.path, vendor_path=ctx.vendor_dir)
            if nested is None:
                logger.debug("无清单，作为纯源码依赖: %s", identity, extra={"dependency": identity})
                return
            nested.identity = identity
            self._resolve(nested, ctx)
        except VendorKitError as e:
            raise ResolutionError(identity, e) from e
