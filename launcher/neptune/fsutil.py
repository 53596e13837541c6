"""
Overwrite-merge copy primitive shared by every composition step.

A merge never prompts and never fails because a destination path already
exists: files are overwritten, directories are merged into.
"""

from __future__ import annotations
import shutil
from pathlib import Path
from typing import List
from .logging_setup import get_logger

log = get_logger("neptune.fs")


def copy_file(src: Path, dst: Path) -> Path:
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
    return dst


def merge_tree(src: Path, dst: Path) -> Path:
    """Merge directory `src` into directory `dst`, overwriting collisions."""
    dst.mkdir(parents=True, exist_ok=True)
    shutil.copytree(src, dst, dirs_exist_ok=True)
    return dst


def merge_into(src: Path, dst_dir: Path) -> Path:
    """Place `src` (file or directory) inside `dst_dir` under its own name."""
    target = dst_dir / src.name
    if src.is_dir():
        return merge_tree(src, target)
    return copy_file(src, target)


def merge_contents(src_dir: Path, dst_dir: Path) -> List[Path]:
    """Merge every direct child of `src_dir` into `dst_dir`."""
    copied: List[Path] = []
    dst_dir.mkdir(parents=True, exist_ok=True)
    for child in sorted(src_dir.iterdir()):
        copied.append(merge_into(child, dst_dir))
        log.debug("Merged %s -> %s", child, dst_dir)
    return copied


def purge_suffix(directory: Path, suffix: str) -> List[Path]:
    """Delete the files directly inside `directory` whose name ends with `suffix`."""
    removed: List[Path] = []
    if not directory.is_dir():
        return removed
    for p in sorted(directory.iterdir()):
        if p.is_file() and p.name.endswith(suffix):
            p.unlink()
            removed.append(p)
    if removed:
        log.debug("Purged %d *%s file(s) from %s", len(removed), suffix, directory)
    return removed
