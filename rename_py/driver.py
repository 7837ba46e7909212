"""RenamePy - 调度入口

select_mode 把命令行选项解析并校验为唯一的一种操作模式（非法组合以 UsageError
拒绝，不触碰文件系统）；run_mode 把模式分派给对应的引擎并返回汇总结果。
只有起始目录不可访问（RootAccessError）会中止整个操作，单项失败都记录在结果中。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from .config import DEFAULT_OUTPUT_DIR
from .errors import UsageError
from .file_handler import FileHandler
from .folder_rename import FolderRenamer
from .models import (
    AssetExportMode,
    FolderBatchMode,
    FolderRenameMode,
    Mode,
    PatternMode,
    RenameReport,
    Rule,
    RuleMode,
)
from .rename_engine import RenameEngine, compile_pattern
from .wx_exporter import WxExporter

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def select_mode(directory: Optional[PathLike] = None, pattern: Optional[str] = None,
                replacement: Optional[str] = None, rule: Optional[str] = None,
                recursive: bool = False, source_path: Optional[PathLike] = None,
                output_dir: PathLike = DEFAULT_OUTPUT_DIR, prefix: Optional[str] = None,
                parent_dir: Optional[PathLike] = None) -> Mode:
    """校验参数组合，返回唯一的操作模式。

    规则与 pattern/replacement 只能二选一；foldername-rename 的 --dir 与 --pdir 只能二选一。
    """
    uses_pattern = bool(pattern) or replacement is not None
    if rule and uses_pattern:
        raise UsageError("--rule 与 --pattern/--replacement 不能同时使用")
    if not rule and not uses_pattern:
        raise UsageError("必须指定 --pattern 或 --rule 之一")

    if rule:
        selected = Rule.parse(rule)
        if selected is Rule.WX_EXPORTER:
            if recursive:
                logger.debug("--recursive 对 wx-exporter 无效，已忽略")
            return AssetExportMode(
                source=Path(source_path) if source_path else None,
                output_dir=Path(output_dir or DEFAULT_OUTPUT_DIR),
                prefix=prefix or None,
            )
        if selected is Rule.FOLDERNAME_RENAME:
            if bool(directory) == bool(parent_dir):
                raise UsageError("foldername-rename 规则必须指定 --dir 或 --pdir 之一（不能同时指定）")
            if recursive:
                logger.debug("--recursive 对 foldername-rename 无效，已忽略")
            if directory:
                return FolderRenameMode(directory=Path(directory))
            return FolderBatchMode(parent=Path(parent_dir))
        if not directory:
            raise UsageError(f"规则 {selected.value} 需要指定 --dir")
        return RuleMode(directory=Path(directory), rule=selected, recursive=recursive)

    if not pattern:
        raise UsageError("指定了 --replacement 但缺少 --pattern")
    if not directory:
        raise UsageError("模式替换需要指定 --dir")
    return PatternMode(
        directory=Path(directory),
        pattern=compile_pattern(pattern),
        replacement=replacement or "",
        recursive=recursive,
    )


def run_mode(mode: Mode, dry_run: bool = False, handler: Optional[FileHandler] = None) -> RenameReport:
    """把模式分派给对应引擎。起始目录不可访问时抛出 RootAccessError。"""
    handler = handler or FileHandler()
    if isinstance(mode, PatternMode):
        engine = RenameEngine(handler, dry_run=dry_run)
        return engine.rename_with_pattern(mode.directory, mode.pattern, mode.replacement, mode.recursive)
    if isinstance(mode, RuleMode):
        engine = RenameEngine(handler, dry_run=dry_run)
        return engine.rename_with_rule(mode.directory, mode.rule, mode.recursive)
    if isinstance(mode, AssetExportMode):
        return WxExporter(handler, dry_run=dry_run).export(mode.source, mode.output_dir, mode.prefix)
    if isinstance(mode, FolderRenameMode):
        return FolderRenamer(handler, dry_run=dry_run).rename_folder(mode.directory)
    if isinstance(mode, FolderBatchMode):
        return FolderRenamer(handler, dry_run=dry_run).rename_subfolders(mode.parent)
    raise UsageError(f"未知的操作模式: {mode!r}")
