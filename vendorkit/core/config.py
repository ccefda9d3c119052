"""集中配置管理

提供统一的配置入口，支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from vendorkit.core.exceptions import ConfigError
from vendorkit.utils.file_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "vendorkit.config.yml"


@dataclass
class Config:
    """全局配置"""

    # 代码托管平台
    host: str = "github.com"

    # 包目录下存放依赖的子目录名
    vendor_dir_name: str = "dependencies"

    # 清单
    default_format: str = "json"

    # 拉取
    max_workers: int = 1
    git_timeout: int = 600  # 秒

    # 放不到字段里的配置项
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        cfg.check()
        return cfg

    def check(self) -> None:
        """校验字段取值"""
        if self.default_format not in ("json", "yaml"):
            raise ConfigError(f"default_format 仅支持 json/yaml: {self.default_format}")
        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise ConfigError(f"max_workers 必须为正整数: {self.max_workers}")
        if not self.host:
            raise ConfigError("host 不能为空")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# 全局单例，由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current


def reset_config() -> None:
    """恢复未初始化状态"""
    global _current  # noqa: PLW0603
    _current = None
