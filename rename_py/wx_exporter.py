"""RenamePy - wx-exporter 图片导出

目录结构::

    path1/                  源根目录（默认当前目录）
      path2/                每个直接子目录是一个独立的序号作用域
        assets/             固定名称的子目录，缺失时整体跳过该 path2
          *.png|jpg|...     只取直接位于 assets 下的图片文件

导出文件名为 <前缀>_<path2 名>_<三位序号><扩展名>，前缀默认取 path1 的目录名，
全部复制到一个扁平的输出目录，已存在的同名文件会被覆盖。
"""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Union

from .config import ASSETS_DIR_NAME, DEFAULT_OUTPUT_DIR, IMAGE_EXTENSIONS, SEQUENCE_WIDTH
from .errors import RootAccessError
from .models import Action, DirEntry, RenameOp, RenameReport
from .traversal import TreeWalker


class WxExporter(TreeWalker):
    """把 path1/path2/assets/ 下的图片复制并重命名到输出目录。"""

    def export(self, source: Optional[Union[str, Path]] = None,
               output_dir: Union[str, Path] = DEFAULT_OUTPUT_DIR,
               prefix: Optional[str] = None) -> RenameReport:
        """执行导出。

        参数:
          - source: path1，缺省为当前工作目录
          - output_dir: 输出目录，不存在时创建（dry-run 时不创建）
          - prefix: 文件名前缀，缺省为 path1 的目录名
        返回:
          RenameReport，其中每个操作的 action 为 copy
        """
        root = self.handler.require_directory(source if source else Path.cwd())
        try:
            path2_dirs = self.handler.list_subdirectories(root)
        except OSError as e:
            raise RootAccessError(f"无法读取源目录 {root}: {e}") from e

        out = self.handler.resolve(output_dir)
        if not self.dry_run:
            self.handler.create_directory(out)

        report = self.new_report()
        if not path2_dirs:
            msg = f"No subdirectories found in {root}"
            self.logger.warning(f"Warning: {msg}")
            report.warnings.append(msg)
            return report

        name_prefix = prefix or root.name
        # 每次调用独立的序号表：path2 名 -> 已导出数量
        sequences: Dict[str, int] = defaultdict(int)
        for path2 in path2_dirs:
            for op in self._plan_path2(path2, out, name_prefix, sequences, report):
                self.apply(op, report)
        return report

    def _plan_path2(self, path2: DirEntry, out: Path, name_prefix: str,
                    sequences: Dict[str, int], report: RenameReport) -> List[RenameOp]:
        assets = path2.path / ASSETS_DIR_NAME
        if not assets.is_dir():
            self.logger.debug(f"缺少 {ASSETS_DIR_NAME} 目录，跳过: {path2.path}")
            report.skipped.append((path2.path, f"缺少 {ASSETS_DIR_NAME} 目录"))
            return []
        try:
            entries = self.handler.list_entries(assets)
        except OSError as e:
            msg = f"Failed to read assets directory {assets}: {e}"
            self.logger.warning(f"Warning: {msg}")
            report.warnings.append(msg)
            return []

        ops = []
        for entry in entries:
            if entry.is_dir:
                continue
            ext = self.handler.extension_of(entry.name).lower()
            if ext not in IMAGE_EXTENSIONS:
                continue
            sequences[path2.name] += 1
            new_name = f"{name_prefix}_{path2.name}_{sequences[path2.name]:0{SEQUENCE_WIDTH}d}{ext}"
            ops.append(RenameOp(entry.path, out / new_name, Action.COPY))
        return ops
