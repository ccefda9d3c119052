"""依赖标识

依赖引用字符串语法:

    owner/repository[:subpath][@version]

- owner / repository: 必填，代码托管平台上的用户和仓库名
- subpath: 可选，源码在仓库内的相对目录，可包含 '/'
- version: 可选，标签名；缺省表示默认分支最新提交，由拉取器确定实际 commit

解析结果 (owner, repository, subpath, version) 即解析键，
键相同的两个标识指向同一份本地副本。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace

from vendorkit.core.exceptions import MalformedReferenceError

_NAME_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")

ResolutionKey = tuple[str, str, str, str]


@dataclass(frozen=True)
class DependencyIdentity:
    """依赖标识，解析后不可变

    commit 记录解析器实际检出的提交，不参与相等比较和哈希。
    """

    owner: str
    repository: str
    subpath: str = ""
    version: str = ""
    commit: str = field(default="", compare=False)

    @property
    def key(self) -> ResolutionKey:
        return (self.owner, self.repository, self.subpath, self.version)

    @property
    def location(self) -> tuple[str, str]:
        """本地依赖目录由 (owner, repository) 唯一确定"""
        return (self.owner, self.repository)

    def with_commit(self, commit: str) -> DependencyIdentity:
        return replace(self, commit=commit)

    def __str__(self) -> str:
        text = f"{self.owner}/{self.repository}"
        if self.subpath:
            text += f":{self.subpath}"
        if self.version:
            text += f"@{self.version}"
        return text


def _check_name(reference: str, value: str, label: str) -> None:
    if not value:
        raise MalformedReferenceError(reference, f"缺少 {label}")
    if value in (".", ".."):
        raise MalformedReferenceError(reference, f"{label} 不能是路径跳转段 '{value}'")
    if not _NAME_RE.match(value):
        raise MalformedReferenceError(reference, f"{label} 包含非法字符: {value}")


def parse_reference(reference: str) -> DependencyIdentity:
    """解析依赖引用字符串

    空白字符直接拒绝而不是裁剪；owner/repository 缺失、
    任何位置出现 '..' 路径段都会抛出 MalformedReferenceError。
    """
    if not reference:
        raise MalformedReferenceError(reference, "引用为空")
    if any(ch.isspace() for ch in reference):
        raise MalformedReferenceError(reference, "不允许包含空白字符")

    rest, sep, version = reference.partition("@")
    if sep and not version:
        raise MalformedReferenceError(reference, "'@' 之后缺少版本")
    if "@" in version:
        raise MalformedReferenceError(reference, "只能有一个 '@'")

    names, sep, subpath = rest.partition(":")
    if sep and not subpath:
        raise MalformedReferenceError(reference, "':' 之后缺少子路径")

    parts = names.split("/")
    if len(parts) != 2:
        raise MalformedReferenceError(reference, "格式应为 owner/repository")
    owner, repository = parts
    _check_name(reference, owner, "owner")
    _check_name(reference, repository, "repository")

    if subpath:
        if subpath.startswith("/"):
            raise MalformedReferenceError(reference, f"子路径必须是相对路径: {subpath}")
        segments = subpath.rstrip("/").split("/")
        if ".." in segments:
            raise MalformedReferenceError(reference, f"子路径包含 '..': {subpath}")
        if ":" in subpath:
            raise MalformedReferenceError(reference, "只能有一个 ':'")

    return DependencyIdentity(
        owner=owner, repository=repository, subpath=subpath, version=version,
    )
