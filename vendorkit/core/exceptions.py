"""统一异常体系

所有业务异常继承 VendorKitError，按 code 区分类别。
CLI 层据此输出友好提示，调用方可按子类精确捕获。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vendorkit.core.dep.identity import DependencyIdentity


class VendorKitError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(VendorKitError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(VendorKitError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class MalformedReferenceError(ValidationError):
    """依赖引用字符串无法解析"""

    code = "MALFORMED_REFERENCE"

    def __init__(self, reference: str, reason: str) -> None:
        super().__init__(f"依赖引用 '{reference}' 无效: {reason}")
        self.reference = reference
        self.reason = reason


class ManifestValidationError(ValidationError):
    """清单结构不满足要求

    kind 取值: MissingEntry / MissingOutput / EntryEqualsOutput / ArchiveOnlyField
    """

    code = "MANIFEST_INVALID"

    MISSING_ENTRY = "MissingEntry"
    MISSING_OUTPUT = "MissingOutput"
    ENTRY_EQUALS_OUTPUT = "EntryEqualsOutput"
    ARCHIVE_ONLY_FIELD = "ArchiveOnlyField"

    def __init__(self, kind: str, message: str, details: list[str] | None = None) -> None:
        super().__init__(message, details)
        self.kind = kind


class ManifestError(VendorKitError):
    """清单文件无法读取或解析"""

    code = "MANIFEST_ERROR"


class NotALocalPackageError(VendorKitError):
    """清单没有对应的本地目录，无法解析依赖"""

    code = "NOT_LOCAL_PACKAGE"


class DependencyError(VendorKitError):
    """依赖拉取或解析失败"""

    code = "DEPENDENCY_ERROR"


class FetchError(DependencyError):
    """拉取/检出单个依赖失败，消息中带出依赖标识"""

    code = "FETCH_ERROR"

    def __init__(self, identity: DependencyIdentity, cause: BaseException) -> None:
        super().__init__(f"拉取依赖失败 {identity}: {cause}")
        self.identity = identity
        self.cause = cause


class ResolutionError(DependencyError):
    """嵌套依赖解析失败，逐层包装出错依赖所在的路径

    消息形如 "a/b@v1 -> c/d -> 拉取依赖失败 e/f: ..."
    """

    code = "RESOLUTION_ERROR"

    def __init__(self, identity: DependencyIdentity, cause: VendorKitError) -> None:
        super().__init__(f"{identity} -> {cause}")
        self.identity = identity
        self.cause = cause

    @property
    def chain(self) -> list[DependencyIdentity]:
        """从外到内经过的依赖标识"""
        result = [self.identity]
        inner = self.cause
        while isinstance(inner, ResolutionError):
            result.append(inner.identity)
            inner = inner.cause
        return result

    @property
    def root_cause(self) -> VendorKitError:
        inner = self.cause
        while isinstance(inner, ResolutionError):
            inner = inner.cause
        return inner


class ExecutionError(VendorKitError):
    """外部命令执行失败"""

    code = "EXECUTION_ERROR"
