"""包附属资源（头文件目录、插件二进制、任意文件）及按平台筛选"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from vendorkit.core.exceptions import ManifestError, ManifestValidationError

if TYPE_CHECKING:
    from vendorkit.core.dep.manifest import PackageManifest


@dataclass(frozen=True)
class Resource:
    """单个资源描述

    platform 为空表示任何平台都适用。
    includes / plugins / files 仅对 archive 资源有意义。
    """

    name: str
    platform: str = ""
    archive: bool = False
    includes: tuple[str, ...] = ()
    plugins: tuple[str, ...] = ()
    files: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        if self.archive:
            return
        populated = [
            k for k, v in (
                ("includes", self.includes),
                ("plugins", self.plugins),
                ("files", self.files),
            ) if v
        ]
        if populated:
            raise ManifestValidationError(
                ManifestValidationError.ARCHIVE_ONLY_FIELD,
                f"资源 '{self.name}' 不是 archive，不能设置 {', '.join(populated)}",
                details=populated,
            )

    def applies_to(self, platform: str) -> bool:
        return not self.platform or self.platform.casefold() == platform.casefold()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Resource:
        if not isinstance(data, dict):
            raise ManifestError(f"资源描述必须是对象: {data!r}")
        name = data.get("name", "")
        for key in ("name", "platform"):
            if not isinstance(data.get(key) or "", str):
                raise ManifestError(f"资源 {key} 必须是字符串: {data.get(key)!r}")
        for key in ("includes", "plugins"):
            value = data.get(key) or []
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ManifestError(f"资源 '{name}' 的 {key} 必须是字符串列表: {value!r}")
        files = data.get("files") or {}
        if not isinstance(files, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in files.items()
        ):
            raise ManifestError(f"资源 '{name}' 的 files 必须是 源路径 -> 目标路径 映射: {files!r}")
        res = cls(
            name=name,
            platform=data.get("platform", "") or "",
            archive=bool(data.get("archive", False)),
            includes=tuple(data.get("includes") or ()),
            plugins=tuple(data.get("plugins") or ()),
            files=dict(files),
        )
        res.validate()
        return res

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.platform:
            out["platform"] = self.platform
        if self.archive:
            out["archive"] = True
        if self.includes:
            out["includes"] = list(self.includes)
        if self.plugins:
            out["plugins"] = list(self.plugins)
        if self.files:
            out["files"] = dict(self.files)
        return out


def current_platform() -> str:
    """当前运行平台: windows / darwin / linux 等"""
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def applicable_resources(
    manifest: PackageManifest, platform: str | None = None,
) -> list[Resource]:
    """返回适用于 platform 的资源，保持声明顺序；platform 缺省时取当前平台"""
    target = platform if platform is not None else current_platform()
    return [r for r in manifest.resources if r.applies_to(target)]
