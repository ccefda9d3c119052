"""包清单

清单描述一个包的标识、依赖以及构建/运行所需的配置，
位于包根目录，文件名按格式固定:

  - vendorkit.json
  - vendorkit.yaml

is_root / local_path / vendor_path / format / all_dependencies 是运行时状态，
不写入清单文件。标识字段在文件中平铺为 owner/repository/subpath/version，
内存中以 identity 子记录表示。
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from vendorkit.core.config import get_config
from vendorkit.core.dep.identity import DependencyIdentity
from vendorkit.core.dep.resources import Resource
from vendorkit.core.exceptions import ManifestError, ManifestValidationError
from vendorkit.utils.file_io import load_json, load_yaml, save_json, save_yaml

logger = logging.getLogger(__name__)

MANIFEST_FILES = {
    "json": "vendorkit.json",
    "yaml": "vendorkit.yaml",
}

_IDENTITY_KEYS = ("owner", "repository", "subpath", "version")


def manifest_file(directory: str | Path, fmt: str) -> Path:
    return Path(directory) / MANIFEST_FILES[fmt]


def find_manifest(directory: str | Path) -> tuple[Path, str] | None:
    """在目录下按 json → yaml 顺序查找清单文件"""
    for fmt in ("json", "yaml"):
        path = manifest_file(directory, fmt)
        if path.is_file():
            return path, fmt
    return None


def canonical_url(owner: str, repository: str, host: str = "github.com") -> str:
    """生成仓库 URL，不做任何网络校验"""
    return f"https://{host}/{owner}/{repository}"


@dataclass
class PackageManifest:
    """包清单"""

    # 运行时状态
    is_root: bool = False
    local_path: Path | None = None
    vendor_path: Path | None = None
    format: str = field(default_factory=lambda: get_config().default_format)
    all_dependencies: list[DependencyIdentity] = field(default_factory=list)

    # 标识，vendored 清单由拉取位置推断
    identity: DependencyIdentity = field(
        default_factory=lambda: DependencyIdentity(owner="", repository=""),
    )

    # 描述信息
    contributors: list[str] = field(default_factory=list)
    website: str = ""

    # 功能字段
    entry: str = ""
    output: str = ""
    dependencies: list[str] = field(default_factory=list)
    builds: list[dict[str, Any]] = field(default_factory=list)
    runtime: dict[str, Any] | None = None
    resources: list[Resource] = field(default_factory=list)

    def __str__(self) -> str:
        return self.identity_string()

    def identity_string(self) -> str:
        """owner/repository:version，用于日志和展示"""
        return f"{self.identity.owner}/{self.identity.repository}:{self.identity.version}"

    def canonical_url(self, host: str = "github.com") -> str:
        return canonical_url(self.identity.owner, self.identity.repository, host)

    def validate(self) -> None:
        """校验入口文件和输出文件

        只对正在构建的根包调用；vendored 依赖可以是没有入口的纯库。
        """
        if not self.entry:
            raise ManifestValidationError(
                ManifestValidationError.MISSING_ENTRY, "清单未定义入口文件 (entry)",
            )
        if not self.output:
            raise ManifestValidationError(
                ManifestValidationError.MISSING_OUTPUT, "清单未定义输出文件 (output)",
            )
        if self.entry == self.output:
            raise ManifestValidationError(
                ManifestValidationError.ENTRY_EQUALS_OUTPUT,
                f"入口文件与输出文件相同: {self.entry}",
            )

    # ------------------------------------------------------------------
    # 序列化
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any], **state: Any) -> PackageManifest:
        """从清单字典构建；state 传入运行时字段（is_root / local_path 等）"""
        identity = DependencyIdentity(
            **{k: str(data.get(k) or "") for k in _IDENTITY_KEYS},
        )
        runtime = data.get("runtime")
        if runtime is not None and not isinstance(runtime, dict):
            raise ManifestError(f"runtime 必须是对象: {runtime!r}")
        for key in ("contributors", "dependencies", "builds", "resources"):
            value = data.get(key)
            if value is not None and not isinstance(value, list):
                raise ManifestError(f"{key} 必须是列表: {value!r}")
        return cls(
            identity=identity,
            contributors=list(data.get("contributors") or []),
            website=data.get("website", "") or "",
            entry=data.get("entry", "") or "",
            output=data.get("output", "") or "",
            dependencies=[str(d) for d in data.get("dependencies") or []],
            builds=list(data.get("builds") or []),
            runtime=runtime,
            resources=[Resource.from_dict(r) for r in data.get("resources") or []],
            **state,
        )

    def to_dict(self) -> dict[str, Any]:
        """序列化为清单字典，省略空字段"""
        out: dict[str, Any] = {}
        for key in _IDENTITY_KEYS:
            value = getattr(self.identity, key)
            if value:
                out[key] = value
        if self.contributors:
            out["contributors"] = list(self.contributors)
        if self.website:
            out["website"] = self.website
        if self.entry:
            out["entry"] = self.entry
        if self.output:
            out["output"] = self.output
        if self.dependencies:
            out["dependencies"] = list(self.dependencies)
        if self.builds:
            out["builds"] = list(self.builds)
        if self.runtime is not None:
            out["runtime"] = self.runtime
        if self.resources:
            out["resources"] = [r.to_dict() for r in self.resources]
        return out

    @classmethod
    def load(
        cls,
        directory: str | Path,
        *,
        is_root: bool = False,
        vendor_path: str | Path | None = None,
    ) -> PackageManifest | None:
        """从包目录加载清单，目录下没有清单文件时返回 None

        异常:
            ManifestError: 文件格式错误或字段类型不对
            ManifestValidationError: 资源描述配置错误
        """
        found = find_manifest(directory)
        if found is None:
            return None
        path, fmt = found
        try:
            data = load_json(path, strict=True) if fmt == "json" else load_yaml(path, strict=True)
        except (yaml.YAMLError, json.JSONDecodeError, ValueError, OSError) as e:
            raise ManifestError(f"无法读取清单 {path}: {e}") from e

        local = Path(directory)
        try:
            manifest = cls.from_dict(
                data,
                is_root=is_root,
                local_path=local,
                vendor_path=Path(vendor_path) if vendor_path else None,
                format=fmt,
            )
        except ManifestError as e:
            raise ManifestError(f"清单 {path} 无效: {e}") from e
        except (TypeError, AttributeError, ValueError) as e:
            raise ManifestError(f"清单字段类型错误 {path}: {e}") from e
        logger.debug("已加载清单: %s (%s)", path, fmt)
        return manifest

    def save(self) -> Path:
        """按原格式写回 local_path 下的清单文件"""
        if self.local_path is None:
            raise ManifestError(f"清单 {self} 没有本地目录，无法保存")
        if self.format not in MANIFEST_FILES:
            raise ManifestError(f"不支持的清单格式: {self.format}")
        path = manifest_file(self.local_path, self.format)
        if self.format == "json":
            save_json(path, self.to_dict())
        else:
            save_yaml(path, self.to_dict())
        logger.info("清单已保存: %s", path)
        return path
