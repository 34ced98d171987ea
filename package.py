#!/usr/bin/env python3
"""
Memos 插件打包脚本
把插件打包为 zip，供启动器的插件管理直接安装
"""

import json
import zipfile
import shutil
from pathlib import Path

ROOT_DIR = Path(__file__).parent

# 需要包含的文件和目录
INCLUDE_ITEMS = [
    "main.py",
    "plugin.json",
    "lang/",
    "images/",
    "memos_wox/",
]

# 排除的文件模式
EXCLUDE_PATTERNS = [
    "__pycache__",
    ".pyc",
    ".pyo",
    ".DS_Store",
    ".egg-info",
]


def should_exclude(file_path: Path) -> bool:
    """检查文件是否应该被排除"""
    file_str = str(file_path)
    return any(pattern in file_str for pattern in EXCLUDE_PATTERNS)


def read_manifest() -> dict:
    with open(ROOT_DIR / "plugin.json", encoding="utf-8") as f:
        return json.load(f)


def iter_plugin_files():
    """按 INCLUDE_ITEMS 顺序列出要打包的文件，缺失的条目会被跳过"""
    for item in INCLUDE_ITEMS:
        item_path = ROOT_DIR / item
        if not item_path.exists():
            print(f"⚠️  跳过不存在的条目: {item}")
            continue
        if item_path.is_file():
            if not should_exclude(item_path):
                yield item_path
            continue
        for file_path in sorted(item_path.rglob("*")):
            if file_path.is_file() and not should_exclude(file_path):
                yield file_path


def create_plugin_package(output_dir: Path = ROOT_DIR / "dist") -> Path:
    """创建插件包，返回 zip 文件路径"""
    manifest = read_manifest()
    plugin_name = manifest["Name"]
    version = manifest["Version"]
    zip_file = output_dir / f"{plugin_name.lower()}-{version}.wox"

    print(f"📦 开始打包 {plugin_name} {version} ...")
    if output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True)

    with zipfile.ZipFile(zip_file, 'w', zipfile.ZIP_DEFLATED) as zf:
        for file_path in iter_plugin_files():
            arc_path = file_path.relative_to(ROOT_DIR).as_posix()
            zf.write(file_path, arc_path)
            print(f"✅ 添加文件: {arc_path}")

    with zipfile.ZipFile(zip_file, 'r') as zf:
        file_count = len(zf.namelist())

    file_size = zip_file.stat().st_size
    print(f"\n🎉 打包完成: {zip_file}")
    print(f"📏 文件大小: {file_size:,} bytes ({file_size/1024:.1f} KB)，共 {file_count} 个文件")
    return zip_file


if __name__ == "__main__":
    create_plugin_package()
