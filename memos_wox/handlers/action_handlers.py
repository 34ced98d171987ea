"""
Action Handlers - 动作处理器
结果上的每个动作（打开、复制、编辑、删除、创建）都由一个处理器执行。
- IActionHandler: 定义了动作处理器的统一接口。
- ActionDispatcher: 解码宿主回传的 ContextData，按动作类型分派给对应的处理器。
动作在触发时才读取客户端槽，因此总是使用最新配置的客户端。
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from wox_plugin import (
    ActionContext, Context, CopyParams, CopyType, FormActionContext, LogLevel, PublicAPI, RefreshQueryParam
)

from ..core.exceptions import ActionPayloadException
from ..core.payloads import (
    ActionPayload, CopyMemoPayload, CreateMemoPayload, DeleteMemoPayload, EditMemoPayload,
    OpenMemoPayload, decode_payload
)
from ..services.client_slot import ClientSlot
from ..utils import response_manager as i18n
from ..utils.response_manager import ResponseManager

logger = logging.getLogger(__name__)

EDIT_FIELD_KEY = "content"

UrlOpener = Callable[[str], object]


class IActionHandler(ABC):
    """动作处理器接口"""

    def __init__(self, api: PublicAPI, client_slot: ClientSlot, responses: ResponseManager):
        self.api = api
        self.client_slot = client_slot
        self.responses = responses

    @abstractmethod
    async def execute(self, ctx: Context, payload: ActionPayload, action_context: ActionContext) -> None:
        """
        执行动作。

        :param ctx: 宿主上下文。
        :param payload: 已解码、校验过的动作负载。
        :param action_context: 宿主回传的原始数据（表单动作从这里取输入值）。
        """
        pass

    async def _notify(self, ctx: Context, key: str):
        await self.api.notify(ctx, await self.responses.get_response(ctx, key))


class OpenActionHandler(IActionHandler):
    """在默认浏览器中打开 memo"""

    def __init__(self, api: PublicAPI, client_slot: ClientSlot, responses: ResponseManager, url_opener: UrlOpener):
        super().__init__(api, client_slot, responses)
        self.url_opener = url_opener

    async def execute(self, ctx: Context, payload: OpenMemoPayload, action_context: ActionContext) -> None:
        self.url_opener(payload.url)


class CopyActionHandler(IActionHandler):
    """复制 memo 原文到剪贴板"""

    async def execute(self, ctx: Context, payload: CopyMemoPayload, action_context: ActionContext) -> None:
        await self.api.copy(ctx, CopyParams(type=CopyType.TEXT, text=payload.content))


class CreateActionHandler(IActionHandler):
    """用查询文本创建 memo"""

    async def execute(self, ctx: Context, payload: CreateMemoPayload, action_context: ActionContext) -> None:
        client = self.client_slot.get()
        if client is None:
            await self._notify(ctx, i18n.UNCONFIGURED_TITLE)
            return

        result = await client.create_memo(payload.content)
        if result.success:
            await self._notify(ctx, i18n.CREATE_SUCCESS)
            await self.api.refresh_query(ctx, RefreshQueryParam(preserve_selected_index=False))
        else:
            await self.api.notify(ctx, await self.responses.create_failed(ctx, result.error))


class EditActionHandler(IActionHandler):
    """
    编辑 memo
    表单提交的内容为空白或与原文完全相同时什么也不做；否则原样提交，不做裁剪。
    """

    async def execute(self, ctx: Context, payload: EditMemoPayload, action_context: ActionContext) -> None:
        values = action_context.values if isinstance(action_context, FormActionContext) else {}
        new_content = values.get(EDIT_FIELD_KEY) or ""
        if not new_content.strip() or new_content == payload.content:
            logger.debug(f"Edit of {payload.name} skipped: content empty or unchanged")
            return

        client = self.client_slot.get()
        if client is None:
            await self._notify(ctx, i18n.UNCONFIGURED_TITLE)
            return

        result = await client.update_memo(payload.name, new_content)
        if result.success:
            await self._notify(ctx, i18n.UPDATE_SUCCESS)
            await self.api.refresh_query(ctx, RefreshQueryParam(preserve_selected_index=True))
        else:
            await self.api.notify(ctx, await self.responses.update_failed(ctx, result.error))


class DeleteActionHandler(IActionHandler):
    """
    删除 memo
    删除失败只写日志，不弹通知。
    """

    async def execute(self, ctx: Context, payload: DeleteMemoPayload, action_context: ActionContext) -> None:
        client = self.client_slot.get()
        if client is None:
            await self.api.log(ctx, LogLevel.ERROR, f"Cannot delete {payload.name}: Memos is not configured")
            return

        result = await client.delete_memo(payload.name)
        if result.success:
            await self._notify(ctx, i18n.DELETE_SUCCESS)
            await self.api.refresh_query(ctx, RefreshQueryParam(preserve_selected_index=True))
        else:
            logger.error(f"Failed to delete memo {payload.name}: {result.error}")
            await self.api.log(ctx, LogLevel.ERROR, f"Failed to delete memo {payload.name}: {result.error}")


class ActionDispatcher:
    """动作分派器，按动作类型注册处理器"""

    def __init__(self, api: PublicAPI, client_slot: ClientSlot, responses: ResponseManager,
                 url_opener: UrlOpener):
        self.api = api
        self._handlers: Dict[str, IActionHandler] = {}
        self._register_handlers(client_slot, responses, url_opener)

    def _register_handlers(self, client_slot: ClientSlot, responses: ResponseManager, url_opener: UrlOpener):
        """注册所有动作处理器"""
        self._handlers.update({
            OpenMemoPayload.kind: OpenActionHandler(self.api, client_slot, responses, url_opener),
            CopyMemoPayload.kind: CopyActionHandler(self.api, client_slot, responses),
            EditMemoPayload.kind: EditActionHandler(self.api, client_slot, responses),
            DeleteMemoPayload.kind: DeleteActionHandler(self.api, client_slot, responses),
            CreateMemoPayload.kind: CreateActionHandler(self.api, client_slot, responses)
        })

    def get_handler(self, kind: str) -> Optional[IActionHandler]:
        """获取动作处理器"""
        return self._handlers.get(kind)

    async def dispatch(self, ctx: Context, action_context: ActionContext) -> None:
        """
        宿主触发动作时的回调，同时作为编辑表单的 on_submit（此时 action_context 是 FormActionContext）。
        解码失败或处理器出错都只记录日志，不会把异常抛回宿主。
        """
        try:
            payload = decode_payload(action_context.context_data)
        except ActionPayloadException as e:
            logger.error(f"Rejected action payload: {e}")
            await self.api.log(ctx, LogLevel.ERROR, f"Rejected action payload: {e}")
            return

        handler = self.get_handler(payload.kind)
        try:
            await handler.execute(ctx, payload, action_context)
        except Exception as e:
            logger.error(f"Action '{payload.kind}' failed: {e!r}")
            await self.api.log(ctx, LogLevel.ERROR, f"Action '{payload.kind}' failed: {e}")
