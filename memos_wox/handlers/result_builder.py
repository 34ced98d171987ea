"""
Result builder - 结果构建
把一条 memo 转换为启动器结果：标题、副标题、标签、Markdown 预览和四个动作。
图片附件通过图片代理地址引用，预览渲染器不需要携带 Token。
"""

from typing import Dict, List

from wox_plugin import (
    Context, PluginSettingDefinitionItem, PluginSettingDefinitionType, PluginSettingValueTextBox, Result,
    ResultAction, ResultActionType, ResultTail, WoxImage, WoxPreview, WoxPreviewType
)

from ..core.config import APP_ICON_PATH
from ..core.models import Memo
from ..core.payloads import (
    CopyMemoPayload, CreateMemoPayload, DeleteMemoPayload, EditMemoPayload, OpenMemoPayload, encode_payload
)
from ..services.image_proxy import ImageProxyService
from ..services.memos_api import IMemosRepository
from ..utils import response_manager as i18n
from ..utils.content import derive_title, extract_tags, format_timestamp, remove_tags
from ..utils.response_manager import ResponseManager
from ..utils.template_renderer import MEMO_PREVIEW, ITemplateRenderer
from .action_handlers import EDIT_FIELD_KEY, ActionDispatcher

SUBTITLE_SEPARATOR = " · "
WARNING_ICON = "⚠️"
INFO_ICON = "💡"
CREATE_ICON = "✏️"
EDIT_FIELD_MAX_LINES = 10


class MemoResultBuilder:
    """结果构建器"""

    def __init__(self, responses: ResponseManager, renderer: ITemplateRenderer,
                 proxy: ImageProxyService, dispatcher: ActionDispatcher):
        self.responses = responses
        self.renderer = renderer
        self.proxy = proxy
        self.dispatcher = dispatcher

    def app_icon(self) -> WoxImage:
        return WoxImage.new_relative(APP_ICON_PATH)

    async def build_memo_result(self, ctx: Context, memo: Memo, client: IMemosRepository, score: int) -> Result:
        """
        构建一条 memo 的完整结果。

        :param memo: 要展示的 memo。
        :param client: 本次查询读取到的客户端快照。
        :param score: 排序分数，越大越靠前。
        """
        tags = extract_tags(memo.content)
        created = format_timestamp(memo.create_time, memo.created_ts)
        sub_title = SUBTITLE_SEPARATOR.join(
            part for part in (created, " ".join(f"#{tag}" for tag in tags)) if part
        )

        return Result(
            title=derive_title(memo.content) or memo.name,
            sub_title=sub_title,
            icon=self.app_icon(),
            score=score,
            tails=[ResultTail(text=f"#{tag}") for tag in tags],
            preview=await self.build_preview(ctx, memo, client, tags, created),
            actions=await self.build_memo_actions(ctx, memo, client)
        )

    async def build_preview(self, ctx: Context, memo: Memo, client: IMemosRepository,
                            tags: List[str], created: str) -> WoxPreview:
        attachments = []
        for attachment in memo.attachments:
            url = ""
            if attachment.is_image:
                url = self.proxy.build_proxy_url(client.build_attachment_url(attachment))
            attachments.append({"filename": attachment.filename, "url": url})

        markdown = await self.renderer.render(MEMO_PREVIEW, {
            "body": remove_tags(memo.content),
            "attachments": attachments
        })

        properties: Dict[str, str] = {}
        if tags:
            properties[await self.responses.get_response(ctx, i18n.PREVIEW_TAGS)] = ", ".join(f"#{tag}" for tag in tags)
        if created:
            properties[await self.responses.get_response(ctx, i18n.PREVIEW_CREATED)] = created
        if memo.attachments:
            properties[await self.responses.get_response(ctx, i18n.PREVIEW_ATTACHMENTS)] = str(len(memo.attachments))
        properties[await self.responses.get_response(ctx, i18n.PREVIEW_CHARACTERS)] = str(len(memo.content))

        return WoxPreview(preview_type=WoxPreviewType.MARKDOWN, preview_data=markdown, preview_properties=properties)

    async def build_memo_actions(self, ctx: Context, memo: Memo, client: IMemosRepository) -> List[ResultAction]:
        callback = self.dispatcher.dispatch
        get = self.responses.get_response
        return [
            ResultAction(
                name=await get(ctx, i18n.ACTION_OPEN),
                action=callback,
                is_default=True,
                context_data=encode_payload(OpenMemoPayload(url=client.memo_url(memo.name)))
            ),
            ResultAction(
                name=await get(ctx, i18n.ACTION_COPY),
                action=callback,
                context_data=encode_payload(CopyMemoPayload(content=memo.content))
            ),
            ResultAction(
                name=await get(ctx, i18n.ACTION_EDIT),
                type=ResultActionType.FORM,
                on_submit=callback,
                context_data=encode_payload(EditMemoPayload(name=memo.name, content=memo.content)),
                form=[PluginSettingDefinitionItem(
                    type=PluginSettingDefinitionType.TEXTBOX,
                    value=PluginSettingValueTextBox(
                        key=EDIT_FIELD_KEY,
                        label=await get(ctx, i18n.EDIT_FIELD_LABEL),
                        default_value=memo.content,
                        max_lines=EDIT_FIELD_MAX_LINES
                    )
                )]
            ),
            ResultAction(
                name=await get(ctx, i18n.ACTION_DELETE),
                action=callback,
                context_data=encode_payload(DeleteMemoPayload(name=memo.name))
            )
        ]

    async def build_create_result(self, ctx: Context, content: str, title: str, sub_title: str) -> Result:
        """只有一个默认动作的“创建 memo”结果"""
        return Result(
            title=title,
            sub_title=sub_title,
            icon=WoxImage.new_emoji(CREATE_ICON),
            actions=[ResultAction(
                name=await self.responses.get_response(ctx, i18n.ACTION_CREATE),
                action=self.dispatcher.dispatch,
                is_default=True,
                context_data=encode_payload(CreateMemoPayload(content=content))
            )]
        )

    async def build_message_result(self, ctx: Context, title_key: str, sub_title: str,
                                   icon: str = INFO_ICON) -> Result:
        """没有动作的提示结果；副标题可以是已翻译文本或原始错误信息"""
        return Result(
            title=await self.responses.get_response(ctx, title_key),
            sub_title=sub_title,
            icon=WoxImage.new_emoji(icon)
        )
