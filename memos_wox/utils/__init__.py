"""
Utils package
"""

from .content import extract_tags, remove_tags, derive_title, format_timestamp
from .response_manager import ResponseManager
from .template_renderer import ITemplateRenderer, Jinja2TemplateRenderer

__all__ = [
    'extract_tags', 'remove_tags', 'derive_title', 'format_timestamp',
    'ResponseManager', 'ITemplateRenderer', 'Jinja2TemplateRenderer'
]
