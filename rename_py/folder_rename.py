"""RenamePy - 按文件夹名重命名

把目录内的文件重命名为 <文件夹名>_<三位序号><扩展名>，序号按列举顺序从 1 开始。
只处理目录下的直接文件，不下降子目录。批量模式对父目录的每个直接子目录各自独立编号。
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from .config import SEQUENCE_WIDTH
from .errors import RootAccessError
from .models import DirEntry, RenameOp, RenameReport
from .traversal import TreeWalker


class FolderRenamer(TreeWalker):
    """foldername-rename 规则。"""

    def rename_folder(self, directory: Union[str, Path]) -> RenameReport:
        return self.walk(directory, self._folder_visitor, recursive=False)

    def rename_subfolders(self, parent: Union[str, Path]) -> RenameReport:
        """批量模式：父目录不可访问时中止；单个子目录失败只记录警告。"""
        base = self.handler.require_directory(parent)
        try:
            subdirs = self.handler.list_subdirectories(base)
        except OSError as e:
            raise RootAccessError(f"无法读取父目录 {base}: {e}") from e

        report = self.new_report()
        for sub in subdirs:
            try:
                self.walk(sub.path, self._folder_visitor, recursive=False, report=report)
            except OSError as e:
                msg = f"处理 {sub.path} 失败: {e}"
                self.logger.warning(f"Error processing {sub.path}: {e}")
                report.warnings.append(msg)
        return report

    def _folder_visitor(self, directory: Path, files: List[DirEntry],
                        report: RenameReport) -> List[RenameOp]:
        folder = directory.name
        return [
            RenameOp(entry.path,
                     directory / f"{folder}_{seq:0{SEQUENCE_WIDTH}d}{self.handler.extension_of(entry.name)}")
            for seq, entry in enumerate(files, start=1)
        ]
