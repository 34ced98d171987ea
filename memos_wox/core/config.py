"""
Plugin configuration - 插件配置
Memos 的连接信息来自启动器的设置存储（host / token），
此处只负责规范化，以及集中存放插件使用的常量。
"""

from dataclasses import dataclass

SETTING_HOST = "host"
SETTING_TOKEN = "token"
CLIENT_SETTING_KEYS = (SETTING_HOST, SETTING_TOKEN)

COMMAND_CREATE = "create"

REQUEST_TIMEOUT_SECONDS = 10
LIST_PAGE_SIZE = 20
# 搜索只在最近的 100 条 memo 中进行客户端过滤，更早的 memo 不会被搜到
SEARCH_CANDIDATE_LIMIT = 100
ERROR_BODY_LIMIT = 200
DEFAULT_VISIBILITY = "PRIVATE"

TITLE_MAX_LENGTH = 20
TITLE_TRUNCATE_AT = 17
TITLE_ELLIPSIS = "..."

PROXY_BIND_HOST = "127.0.0.1"
PROXY_CACHE_CONTROL = "public, max-age=3600"
PROXY_FALLBACK_CONTENT_TYPE = "image/png"

APP_ICON_PATH = "images/app.png"


def normalize_host(host: str) -> str:
    """去掉首尾空白和末尾的斜杠"""
    return (host or "").strip().rstrip("/")


@dataclass(frozen=True)
class ClientConfig:
    """
    Memos 客户端配置
    每次设置变化都会生成一个新的实例，从不原地修改。
    """
    host: str
    token: str

    @classmethod
    def from_settings(cls, host: str, token: str) -> "ClientConfig":
        return cls(host=normalize_host(host), token=(token or "").strip())

    @property
    def is_complete(self) -> bool:
        return bool(self.host and self.token)
