#!/usr/bin/env python3
"""RenamePy - 命令行入口

  renamepy rename --dir ./files --pattern "file_(\\d+)\\.txt" --replacement "document_$1.txt"
  renamepy rename --dir ./photos --rule timestamp --recursive --dry-run
  renamepy rename --rule wx-exporter --source-path ./site --output-dir ./out --pre-name site
  renamepy rename --rule foldername-rename --pdir ./reports
  renamepy exif --image ./photo.jpg --format json
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import DEFAULT_OUTPUT_DIR, get_log_level
from .driver import run_mode, select_mode
from .errors import UsageError
from .file_handler import FileHandler
from .image_handler import OUTPUT_FORMATS, ImageHandler, format_exif
from .models import Rule


def setup_logging(verbose: bool = False) -> logging.Logger:
    """配置日志记录器。"""
    logger = logging.getLogger("rename_py")
    logger.setLevel(logging.DEBUG if verbose else get_log_level())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="renamepy",
        description="RenamePy 批量重命名与图片 EXIF 工具",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="显示详细日志")
    sub = parser.add_subparsers(dest="cmd", required=True)

    # rename
    rn = sub.add_parser("rename", help="批量重命名目录中的文件")
    rn.add_argument("--dir", dest="directory", default=None, help="要处理的目录（大多数操作必填）")
    rn.add_argument("--pattern", default=None, help="匹配文件名的正则表达式")
    rn.add_argument("--replacement", default=None, help="替换模板，可用 $1 / ${name} 引用分组")
    rn.add_argument("--rule", default=None, help=f"预定义规则: {' | '.join(Rule.names())}")
    rn.add_argument("--recursive", action="store_true", help="递归处理子目录")
    rn.add_argument("--dry-run", action="store_true", help="仅预览，不实际修改")
    rn.add_argument("--source-path", default=None, help="wx-exporter 源目录（默认当前目录）")
    rn.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR, help="wx-exporter 输出目录")
    rn.add_argument("--pre-name", default=None, help="wx-exporter 文件名前缀（默认源目录名）")
    rn.add_argument("--pdir", default=None, help="foldername-rename 批量模式的父目录")
    rn.add_argument("--json", action="store_true", help="以 JSON 输出汇总结果")
    rn.set_defaults(print_usage=rn.print_help)

    # exif
    ex = sub.add_parser("exif", help="读取图片 EXIF 信息")
    target = ex.add_mutually_exclusive_group(required=True)
    target.add_argument("--image", default=None, help="单张图片路径")
    target.add_argument("--dir", dest="directory", default=None, help="图片所在目录")
    ex.add_argument("--format", default="text", choices=OUTPUT_FORMATS, help="输出格式")
    ex.add_argument("--recursive", action="store_true", help="递归处理子目录")
    return parser


def cmd_rename(args: argparse.Namespace, logger: logging.Logger) -> int:
    try:
        mode = select_mode(
            directory=args.directory,
            pattern=args.pattern,
            replacement=args.replacement,
            rule=args.rule,
            recursive=args.recursive,
            source_path=args.source_path,
            output_dir=args.output_dir,
            prefix=args.pre_name,
            parent_dir=args.pdir,
        )
    except UsageError as e:
        print(f"错误: {e}", file=sys.stderr)
        args.print_usage(sys.stderr)
        return 2

    try:
        report = run_mode(mode, dry_run=args.dry_run, handler=FileHandler(logger=logger))
    except OSError as e:
        print(f"错误: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(report.summary())
    return 0


def cmd_exif(args: argparse.Namespace, logger: logging.Logger) -> int:
    ih = ImageHandler(logger=logger)
    if args.image:
        try:
            tags = ih.read_exif(args.image)
        except (OSError, ValueError) as e:
            print(f"错误: {e}", file=sys.stderr)
            return 1
        print(f"\n=== EXIF Information for {args.image} ===")
        print(format_exif(tags, args.format))
        return 0

    try:
        results = ih.read_exif_dir(args.directory, recursive=args.recursive)
    except OSError as e:
        print(f"错误: {e}", file=sys.stderr)
        return 1
    for path, tags in results:
        if isinstance(tags, str):
            continue
        print(f"\n=== EXIF Information for {path} ===")
        print(format_exif(tags, args.format))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    logger = setup_logging(args.verbose)

    if args.cmd == "rename":
        return cmd_rename(args, logger)
    if args.cmd == "exif":
        return cmd_exif(args, logger)
    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
