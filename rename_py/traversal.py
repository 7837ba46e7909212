"""RenamePy - 目录遍历骨架

所有按目录处理的规则（pattern / timestamp / sequence / lowercase）共用同一个
深度优先遍历：每个目录重新列举一次，先把该目录的文件项整体交给规则对应的
visitor 生成 RenameOp 并经 apply 记录或执行，再按列举顺序下降到子目录。

外部进程在遍历期间修改目录树不做同步，消失的条目会作为单项失败上报。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

from .errors import RootAccessError
from .file_handler import FileHandler
from .models import Action, DirEntry, RenameOp, RenameReport

# visitor(directory, file_entries, report) -> 该目录下按顺序生成的操作
Visitor = Callable[[Path, List[DirEntry], RenameReport], List[RenameOp]]


class TreeWalker:
    """遍历与执行的公共部分，各引擎继承后只需提供 visitor。"""

    def __init__(self, handler: Optional[FileHandler] = None, dry_run: bool = False,
                 logger: Optional[logging.Logger] = None):
        self.handler = handler or FileHandler(logger=logger)
        self.logger = logger or self.handler.logger
        self.dry_run = dry_run

    def new_report(self) -> RenameReport:
        return RenameReport(dry_run=self.dry_run)

    def walk(self, root: Union[str, Path], visitor: Visitor, recursive: bool = False,
             report: Optional[RenameReport] = None) -> RenameReport:
        """从 root 开始遍历。root 不可访问时抛出 RootAccessError，不做任何修改。"""
        report = report if report is not None else self.new_report()
        base = self.handler.require_directory(root)
        try:
            entries = self.handler.list_entries(base)
        except OSError as e:
            raise RootAccessError(f"无法读取目录 {base}: {e}") from e

        stack = [(base, entries)]
        while stack:
            directory, entries = stack.pop()
            if entries is None:
                try:
                    entries = self.handler.list_entries(directory)
                except OSError as e:
                    msg = f"无法读取目录 {directory}: {e}"
                    self.logger.warning(f"Warning: {msg}")
                    report.warnings.append(msg)
                    continue
            files = [e for e in entries if not e.is_dir]
            if files:
                for op in visitor(directory, files, report):
                    self.apply(op, report)
            if not recursive:
                continue
            subdirs = [e.path for e in entries if e.is_dir]
            # 逆序入栈，出栈顺序即列举顺序；子目录在出栈时才列举
            stack.extend((p, None) for p in reversed(subdirs))
        return report

    def apply(self, op: RenameOp, report: RenameReport) -> bool:
        """记录（dry-run）或执行一个操作。单项失败只记录警告，不向上抛。"""
        if op.src == op.dst:
            self.logger.debug(f"名称未变化，跳过: {op.src}")
            return False
        report.planned.append(op)
        copying = op.action is Action.COPY
        if self.dry_run:
            self.logger.info(f"Would {'copy' if copying else 'rename'}: {op}")
            return True
        self.logger.info(f"{'Copying' if copying else 'Renaming'}: {op}")
        try:
            if copying:
                self.handler.copy_file(op.src, op.dst)
            else:
                self.handler.rename_file(op.src, op.dst)
        except OSError as e:
            self.logger.warning(f"Error {'copying' if copying else 'renaming'} {op.src}: {e}")
            report.failed.append((op, str(e)))
            return False
        report.done.append(op)
        return True
