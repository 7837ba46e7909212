"""RenamePy - 模式替换与命名规则引擎

- 模式替换：文件名匹配正则后，把替换模板（支持 $1、${1}、$name、${name}、$$）
  中的分组引用展开，得到新文件名；不匹配的文件保持不变。
- 命名规则：timestamp（修改时间前缀）、sequence（file_001.ext）、lowercase（转小写）。

两者都只重命名文件，目录只在 recursive 时被下降，不会被重命名。
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Dict, List, Union

from .config import SEQUENCE_WIDTH, TIMESTAMP_FORMAT
from .errors import UsageError
from .models import DIRECTORY_RULES, DirEntry, RenameOp, RenameReport, Rule
from .traversal import TreeWalker, Visitor

# $$ | ${name} | $name（name 为最长的字母/数字/下划线序列）
_TEMPLATE_REF = re.compile(r"\$(?:(\$)|\{(\w+)\}|(\w+))")


def compile_pattern(pattern: Union[str, re.Pattern[str]]) -> re.Pattern[str]:
    """编译匹配模式，非法正则在遍历开始前以 UsageError 拒绝。"""
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as e:
        raise UsageError(f"非法的正则表达式 {pattern!r}: {e}") from e


def expand_template(match: re.Match[str], template: str) -> str:
    """按 $ 语法展开替换模板。不存在或未参与匹配的分组展开为空串。"""

    def _ref(m: re.Match[str]) -> str:
        if m.group(1):
            return "$"
        name = m.group(2) or m.group(3)
        try:
            value = match.group(int(name) if name.isdigit() else name)
        except IndexError:
            return ""
        return value or ""

    return _TEMPLATE_REF.sub(_ref, template)


def substitute(pattern: re.Pattern[str], template: str, name: str) -> str:
    """把 name 中所有匹配替换为展开后的模板。"""
    return pattern.sub(lambda m: expand_template(m, template), name)


def is_plain_name(name: str) -> bool:
    """新名称必须停留在原目录内：非空、不是 . / ..，且不含路径分隔符。"""
    if name in ("", ".", ".."):
        return False
    return not any(sep and sep in name for sep in (os.sep, os.altsep))


class RenameEngine(TreeWalker):
    """按正则替换或命名规则批量重命名目录中的文件。

    Example::

        engine = RenameEngine(dry_run=True)
        report = engine.rename_with_pattern("./files", r"file_(\\d+)\\.txt", "document_$1.txt")
        for src, dst in report.pairs():
            print(src, "->", dst)
    """

    # ------------------------------------------------------------------
    # 模式替换
    # ------------------------------------------------------------------

    def rename_with_pattern(self, directory: Union[str, Path], pattern: Union[str, re.Pattern[str]],
                            replacement: str, recursive: bool = False) -> RenameReport:
        regex = compile_pattern(pattern)
        return self.walk(directory, self._pattern_visitor(regex, replacement), recursive)

    def _pattern_visitor(self, regex: re.Pattern[str], replacement: str) -> Visitor:
        def visit(directory: Path, files: List[DirEntry], report: RenameReport) -> List[RenameOp]:
            ops = []
            for entry in files:
                if not regex.search(entry.name):
                    continue
                new_name = substitute(regex, replacement, entry.name)
                op = RenameOp(entry.path, directory / new_name)
                if not is_plain_name(new_name):
                    msg = f"新文件名不合法（不能为空或包含路径分隔符）: {new_name!r}"
                    self.logger.warning(f"Error renaming {entry.path}: {msg}")
                    report.failed.append((op, msg))
                    continue
                ops.append(op)
            return ops

        return visit

    # ------------------------------------------------------------------
    # 命名规则
    # ------------------------------------------------------------------

    def rename_with_rule(self, directory: Union[str, Path], rule: Union[str, Rule],
                         recursive: bool = False) -> RenameReport:
        """对目录中的文件应用 timestamp / sequence / lowercase 规则。

        未知规则名抛出 UsageError；目录不可访问抛出 RootAccessError。
        """
        visitor = self._rule_visitors()[parse_directory_rule(rule)]
        return self.walk(directory, visitor, recursive)

    def _rule_visitors(self) -> Dict[Rule, Visitor]:
        return {
            Rule.TIMESTAMP: self._timestamp_visitor,
            Rule.SEQUENCE: self._sequence_visitor,
            Rule.LOWERCASE: self._lowercase_visitor,
        }

    def _timestamp_visitor(self, directory: Path, files: List[DirEntry],
                           report: RenameReport) -> List[RenameOp]:
        ops = []
        for entry in files:
            try:
                stamp = entry.modified().strftime(TIMESTAMP_FORMAT)
            except OSError as e:
                msg = f"Error getting file info for {entry.path}: {e}"
                self.logger.warning(msg)
                report.warnings.append(msg)
                continue
            ops.append(RenameOp(entry.path, directory / f"{stamp}_{entry.name}"))
        return ops

    def _sequence_visitor(self, directory: Path, files: List[DirEntry],
                          report: RenameReport) -> List[RenameOp]:
        return [
            RenameOp(entry.path, directory / f"file_{i:0{SEQUENCE_WIDTH}d}{self.handler.extension_of(entry.name)}")
            for i, entry in enumerate(files, start=1)
        ]

    def _lowercase_visitor(self, directory: Path, files: List[DirEntry],
                           report: RenameReport) -> List[RenameOp]:
        ops = []
        for entry in files:
            lowered = entry.name.lower()
            if lowered == entry.name:
                self.logger.debug(f"已是小写，跳过: {entry.path}")
                report.skipped.append((entry.path, "已是小写"))
                continue
            ops.append(RenameOp(entry.path, directory / lowered))
        return ops


def parse_directory_rule(rule: Union[str, Rule]) -> Rule:
    """把规则名解析为 RenameEngine 支持的规则（不区分大小写）。"""
    parsed = Rule.parse(rule)
    if parsed not in DIRECTORY_RULES:
        raise UsageError(f"规则 {parsed.value} 不能按目录逐项应用")
    return parsed

