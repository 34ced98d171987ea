"""
Response Manager for the Memos plugin
响应管理器：所有面向用户的文本都通过宿主的翻译接口获取，再做占位符替换
"""

from typing import List

from wox_plugin import Context, PublicAPI

UNCONFIGURED_TITLE = "i18n:unconfigured_title"
UNCONFIGURED_SUBTITLE = "i18n:unconfigured_subtitle"

CREATE_TITLE = "i18n:create_title"
CREATE_SUBTITLE = "i18n:create_subtitle"
CREATE_HINT_TITLE = "i18n:create_hint_title"
CREATE_HINT_SUBTITLE = "i18n:create_hint_subtitle"
CREATE_TAGS_HINT_TITLE = "i18n:create_tags_hint_title"
CREATE_TAGS_HINT_SUBTITLE = "i18n:create_tags_hint_subtitle"
CREATE_SUCCESS = "i18n:create_success"
CREATE_FAILED = "i18n:create_failed"

NO_MEMOS_TITLE = "i18n:no_memos_title"
NO_MEMOS_SUBTITLE = "i18n:no_memos_subtitle"
LIST_ERROR_TITLE = "i18n:list_error_title"
SEARCH_ERROR_TITLE = "i18n:search_error_title"
SEARCH_EMPTY_TITLE = "i18n:search_empty_title"
SEARCH_EMPTY_SUBTITLE = "i18n:search_empty_subtitle"

ACTION_OPEN = "i18n:action_open"
ACTION_COPY = "i18n:action_copy"
ACTION_EDIT = "i18n:action_edit"
ACTION_DELETE = "i18n:action_delete"
ACTION_CREATE = "i18n:action_create"

EDIT_FIELD_LABEL = "i18n:edit_field_label"
UPDATE_SUCCESS = "i18n:update_success"
UPDATE_FAILED = "i18n:update_failed"
DELETE_SUCCESS = "i18n:delete_success"

PREVIEW_TAGS = "i18n:preview_tags"
PREVIEW_CREATED = "i18n:preview_created"
PREVIEW_ATTACHMENTS = "i18n:preview_attachments"
PREVIEW_CHARACTERS = "i18n:preview_characters"

ALL_KEYS: List[str] = [value for name, value in list(globals().items()) if name.isupper() and isinstance(value, str)]


class ResponseManager:
    """响应管理器 - 处理翻译文本和占位符替换"""

    def __init__(self, api: PublicAPI):
        self.api = api

    async def get_response(self, ctx: Context, key: str, **kwargs) -> str:
        """
        获取翻译后的文本

        Args:
            ctx: 宿主上下文
            key: 翻译键（i18n: 前缀）
            **kwargs: 用于占位符替换的参数

        Returns:
            格式化后的文本；宿主没有翻译时返回键本身
        """
        template = await self.api.get_translation(ctx, key)

        if not template or not template.strip():
            return key
        if not kwargs:
            return template

        try:
            return template.format(**kwargs)
        except (KeyError, ValueError, IndexError):
            # 如果占位符替换失败，返回原始模板
            return template

    async def create_title(self, ctx: Context, content: str) -> str:
        return await self.get_response(ctx, CREATE_TITLE, content=content)

    async def create_failed(self, ctx: Context, error: str) -> str:
        return await self.get_response(ctx, CREATE_FAILED, error=error)

    async def update_failed(self, ctx: Context, error: str) -> str:
        return await self.get_response(ctx, UPDATE_FAILED, error=error)

    async def search_empty_title(self, ctx: Context, search: str) -> str:
        return await self.get_response(ctx, SEARCH_EMPTY_TITLE, search=search)
