#!/usr/bin/env python3
"""
Memos 插件本地测试工具
在终端里模拟启动器：输入查询直接调用插件，使用真实的 Memos 服务。
连接信息从环境变量 MEMOS_HOST / MEMOS_TOKEN 读取。
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Dict, List

from wox_plugin import (
    ActionContext, Context, CopyParams, FormActionContext, LogLevel, PluginInitParams, PublicAPI, Query, QueryEnv,
    QueryType, RefreshQueryParam, Result, ResultActionType, Selection
)

from memos_wox.plugin import MemosPlugin

ROOT_DIR = Path(__file__).parent
I18N_PREFIX = "i18n:"


class ConsoleAPI(PublicAPI):
    """把宿主 API 映射到终端输出"""

    def __init__(self, settings: Dict[str, str], translations: Dict[str, str]):
        self.settings = settings
        self.translations = translations
        self.setting_callbacks = []
        self.unload_callbacks = []

    async def log(self, ctx, level: LogLevel, msg):
        print(f"[{level.value.upper()}] {msg}")

    async def notify(self, ctx, message):
        print(f"🔔 {message}")

    async def get_setting(self, ctx, key):
        return self.settings.get(key, "")

    async def on_setting_changed(self, ctx, callback):
        self.setting_callbacks.append(callback)

    async def on_unload(self, ctx, callback):
        self.unload_callbacks.append(callback)

    async def get_translation(self, ctx, key):
        return self.translations.get(key[len(I18N_PREFIX):] if key.startswith(I18N_PREFIX) else key, key)

    async def copy(self, ctx, params: CopyParams):
        print(f"📋 已复制: {params.text}")

    async def refresh_query(self, ctx, param: RefreshQueryParam):
        print(f"🔄 刷新查询 (保留选中项: {param.preserve_selected_index})")


def load_translations(lang: str = "en_US") -> Dict[str, str]:
    with open(ROOT_DIR / "lang" / f"{lang}.json", encoding="utf-8") as f:
        return json.load(f)


def parse_query(text: str) -> Query:
    """'create 内容' 视为 create 命令，其余为普通搜索"""
    command, _, rest = text.partition(" ")
    if command != "create":
        command, rest = "", text
    return Query(
        id="console", type=QueryType.INPUT, raw_query=f"memos {text}", selection=Selection(), env=QueryEnv(),
        trigger_keyword="memos", command=command, search=rest.strip()
    )


def print_results(results: List[Result]):
    for index, result in enumerate(results, 1):
        print(f"[{index}] {result.title}  {result.sub_title}")
        for action in result.actions:
            marker = "*" if action.is_default else " "
            print(f"      {marker} {action.name}")


async def trigger(ctx: Context, results: List[Result], command: str):
    """!n 触发第 n 个结果的默认动作，!n:k 触发第 k 个动作"""
    target, _, action_index = command[1:].partition(":")
    try:
        result = results[int(target) - 1]
        if action_index:
            action = result.actions[int(action_index) - 1]
        else:
            action = next(action for action in result.actions if action.is_default)
    except (ValueError, IndexError, StopIteration):
        print("❌ 没有这个动作")
        return

    if action.type != ResultActionType.FORM:
        await action.action(ctx, ActionContext(context_data=action.context_data))
        return

    values = {}
    for item in action.form:
        field = item.value
        value = await asyncio.to_thread(input, f"✏️  {field.label} [{field.default_value}]: ")
        values[field.key] = value or field.default_value
    await action.on_submit(ctx, FormActionContext(context_data=action.context_data, values=values))


async def main():
    """主测试函数"""
    logging.basicConfig(level=logging.INFO)
    print("🎮 Memos 插件测试")
    print("=" * 30)

    settings = {"host": os.environ.get("MEMOS_HOST", ""), "token": os.environ.get("MEMOS_TOKEN", "")}
    api = ConsoleAPI(settings, load_translations(os.environ.get("MEMOS_LANG", "en_US")))
    plugin = MemosPlugin()
    ctx = Context()
    await plugin.init(ctx, PluginInitParams(api=api, plugin_directory=str(ROOT_DIR)))

    print("📝 用法:")
    print("- 回车 → 最近的 memo")
    print("- 关键词 → 搜索")
    print("- create 内容 → 创建 memo")
    print("- !n / !n:k → 触发第 n 个结果的默认动作 / 第 k 个动作")
    print("- quit → 退出\n")

    results: List[Result] = []
    try:
        while True:
            user_input = await asyncio.to_thread(input, "💬 ")
            if user_input.strip().lower() == "quit":
                break
            try:
                if user_input.startswith("!"):
                    await trigger(ctx, results, user_input.strip())
                    continue
                results = await plugin.query(ctx, parse_query(user_input))
                print_results(results)
            except Exception as e:
                print(f"❌ 处理错误: {e}")
    except (KeyboardInterrupt, EOFError):
        pass

    print("\n👋 退出中...")
    for callback in api.unload_callbacks:
        await callback(ctx)
    print("✅ 测试结束")


if __name__ == "__main__":
    asyncio.run(main())
