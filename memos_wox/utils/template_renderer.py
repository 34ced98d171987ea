"""
Template rendering utilities
模板渲染工具，负责生成 memo 的 Markdown 预览
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from jinja2 import DictLoader, Environment

MEMO_PREVIEW = 'memo_preview'

# 正文之后每个附件占一个空行；只有图片附件会输出图片引用
MEMO_PREVIEW_TEMPLATE = (
    "{{ body }}"
    "{% for item in attachments %}\n\n"
    "{% if item.url %}![{{ item.filename }}]({{ item.url }}){% endif %}"
    "{% endfor %}"
)


class ITemplateRenderer(ABC):
    """模板渲染器接口"""

    @abstractmethod
    async def render(self, template_name: str, data: Dict[str, Any]) -> str:
        """渲染模板"""
        pass


class Jinja2TemplateRenderer(ITemplateRenderer):
    """Jinja2 模板渲染器实现"""

    def __init__(self, custom_templates: Optional[Dict[str, str]] = None):
        """
        :param custom_templates: 按名称覆盖内置模板。
        """
        self.templates = {
            MEMO_PREVIEW: MEMO_PREVIEW_TEMPLATE
        }
        if custom_templates:
            self.templates.update(custom_templates)
        # 输出的是 Markdown 而不是 HTML，不做转义
        self.env = Environment(loader=DictLoader(self.templates), autoescape=False)

    async def render(self, template_name: str, data: Dict[str, Any]) -> str:
        """渲染模板"""
        template = self.env.get_template(template_name)
        return template.render(**data)
