"""RenamePy - 数据模型

DirEntry（目录项）、RenameOp（单个重命名/复制操作）、RenameReport（汇总结果），
以及驱动层使用的操作模式（每种模式只携带自己需要的字段）。
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import UsageError


class Rule(Enum):
    """--rule 可选的命名规则。"""

    TIMESTAMP = "timestamp"
    SEQUENCE = "sequence"
    LOWERCASE = "lowercase"
    WX_EXPORTER = "wx-exporter"
    FOLDERNAME_RENAME = "foldername-rename"

    @classmethod
    def names(cls) -> List[str]:
        return [r.value for r in cls]

    @classmethod
    def parse(cls, name: Union[str, "Rule"]) -> "Rule":
        """按名称解析规则（不区分大小写），未知名称抛出 UsageError。"""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise UsageError(f"未知规则: {name}（可选: {', '.join(cls.names())}）") from None


# 由 RenameEngine 在单个目录内处理的规则
DIRECTORY_RULES = (Rule.TIMESTAMP, Rule.SEQUENCE, Rule.LOWERCASE)


class Action(Enum):
    RENAME = "rename"
    COPY = "copy"


@dataclass(frozen=True)
class DirEntry:
    """目录中的一项，每次遍历时从文件系统重新读取。

    is_dir 不跟随符号链接：指向目录的链接按普通文件项处理，不会被下降。
    """

    path: Path
    name: str
    is_dir: bool

    @classmethod
    def from_os(cls, entry: os.DirEntry) -> "DirEntry":
        return cls(path=Path(entry.path), name=entry.name, is_dir=entry.is_dir(follow_symlinks=False))

    def modified(self) -> datetime:
        """文件自身的最后修改时间（本地时间）。"""
        return datetime.fromtimestamp(self.path.stat().st_mtime)


@dataclass(frozen=True)
class RenameOp:
    """单个操作：(源路径, 目标路径, 动作)。生成后立即被记录或执行。"""

    src: Path
    dst: Path
    action: Action = Action.RENAME

    def __str__(self) -> str:
        return f"{self.src} -> {self.dst}"


@dataclass
class RenameReport:
    """一次调用的汇总结果。

    planned 在 dry-run 与实际执行两种模式下完全一致，区别只在 done 是否被填充。
    """

    dry_run: bool = False
    planned: List[RenameOp] = field(default_factory=list)
    done: List[RenameOp] = field(default_factory=list)
    failed: List[Tuple[RenameOp, str]] = field(default_factory=list)
    skipped: List[Tuple[Path, str]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def count_planned(self) -> int:
        return len(self.planned)

    @property
    def count_done(self) -> int:
        return len(self.done)

    @property
    def count_failed(self) -> int:
        return len(self.failed)

    def pairs(self) -> List[Tuple[Path, Path]]:
        return [(op.src, op.dst) for op in self.planned]

    def summary(self) -> str:
        if self.dry_run:
            head = f"计划: {self.count_planned}"
        else:
            head = f"完成: {self.count_done}"
        return (
            f"{head}  失败: {self.count_failed}"
            f"  跳过: {len(self.skipped)}  警告: {len(self.warnings)}"
        )

    def to_dict(self) -> Dict[str, Any]:
        ops = self.planned if self.dry_run else self.done
        return {
            "dry_run": self.dry_run,
            "renamed": [
                {"old_path": str(op.src), "new_path": str(op.dst), "action": op.action.value}
                for op in ops
            ],
            "skipped": [{"path": str(p), "reason": reason} for p, reason in self.skipped],
            "errors": [
                {"old_path": str(op.src), "new_path": str(op.dst), "error": msg}
                for op, msg in self.failed
            ] + [{"error": w} for w in self.warnings],
            "count_renamed": len(ops),
            "count_skipped": len(self.skipped),
            "count_errors": len(self.failed) + len(self.warnings),
        }


# ---------------------------------------------------------------------------
# 操作模式：一次调用恰好对应其中一种
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PatternMode:
    directory: Path
    pattern: re.Pattern[str]
    replacement: str
    recursive: bool = False


@dataclass(frozen=True)
class RuleMode:
    directory: Path
    rule: Rule
    recursive: bool = False


@dataclass(frozen=True)
class AssetExportMode:
    source: Optional[Path]
    output_dir: Path
    prefix: Optional[str] = None


@dataclass(frozen=True)
class FolderRenameMode:
    directory: Path


@dataclass(frozen=True)
class FolderBatchMode:
    parent: Path


Mode = Union[PatternMode, RuleMode, AssetExportMode, FolderRenameMode, FolderBatchMode]
