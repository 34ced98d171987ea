"""
memos-wox: 在启动器中搜索、创建、编辑和删除 Memos 笔记
"""

__version__ = "1.0.0"
