"""清单文件读写工具

JSON / YAML 两种格式的统一读写入口。
统一 encoding="utf-8"、空值保护、大小限制、原子写入。
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 清单文件大小上限 (10MB)
MAX_FILE_SIZE = 10 * 1024 * 1024


def atomic_write(path: Path, content: str) -> None:
    """先写同目录临时文件再 rename，中途失败不会留下半截文件"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, str(path))
    except Exception:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def _read_text(path: Path) -> str:
    size = path.stat().st_size
    if size > MAX_FILE_SIZE:
        raise ValueError(
            f"文件过大: {path} ({size} 字节), 超过限制 {MAX_FILE_SIZE} 字节"
        )
    return path.read_text(encoding="utf-8")


def _as_mapping(p: Path, result: Any, strict: bool) -> dict[str, Any]:
    if result is None:
        return {}
    if not isinstance(result, dict):
        if strict:
            raise ValueError(f"{p} 顶层不是字典 (实际类型: {type(result).__name__})")
        logger.warning(
            "%s 内容不是字典类型 (实际类型: %s)，返回空字典",
            p, type(result).__name__,
        )
        return {}
    return result


def load_yaml(path: str | Path, *, strict: bool = False) -> dict[str, Any]:
    """读取 YAML 文件

    文件不存在或内容为空返回空字典；顶层不是字典时记录警告并返回空字典，
    strict=True 时改为抛 ValueError。

    异常:
        yaml.YAMLError: YAML 格式错误
        ValueError: 文件过大，或 strict 模式下顶层不是字典
    """
    p = Path(path)
    if not p.exists():
        return {}
    try:
        result = yaml.safe_load(_read_text(p))
    except yaml.YAMLError as e:
        logger.error("解析 YAML 文件失败: %s, 错误: %s", p, e)
        raise
    return _as_mapping(p, result, strict)


def save_yaml(path: str | Path, data: Any) -> None:
    """原子写入 YAML 文件，保持键顺序"""
    content = yaml.dump(
        data, default_flow_style=False,
        allow_unicode=True, sort_keys=False,
    )
    atomic_write(Path(path), content)


def load_json(path: str | Path, *, strict: bool = False) -> dict[str, Any]:
    """读取 JSON 文件，语义同 load_yaml

    异常:
        json.JSONDecodeError: JSON 格式错误
        ValueError: 文件过大，或 strict 模式下顶层不是字典
    """
    p = Path(path)
    if not p.exists():
        return {}
    try:
        result = json.loads(_read_text(p) or "null")
    except json.JSONDecodeError as e:
        logger.error("解析 JSON 文件失败: %s, 错误: %s", p, e)
        raise
    return _as_mapping(p, result, strict)


def save_json(path: str | Path, data: Any) -> None:
    """原子写入 JSON 文件，缩进 4 空格"""
    content = json.dumps(data, indent=4, ensure_ascii=False) + "\n"
    atomic_write(Path(path), content)
