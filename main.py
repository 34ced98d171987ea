"""
Memos Plugin Entry - 插件入口
启动器加载本文件并使用其中的 `plugin` 对象：
- init(ctx, init_params): 读取设置、创建客户端、启动图片代理。
- query(ctx, query): 返回结果列表。
- unload(ctx): 停止图片代理并关闭连接。
"""

from memos_wox.plugin import MemosPlugin

plugin = MemosPlugin()
