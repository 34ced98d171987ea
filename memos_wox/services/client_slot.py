"""
Client slot - 客户端引用槽
设置变化时整体替换客户端引用，而不是修改已有客户端的字段。
读取方每次操作只调用一次 get()，拿到的快照在整个操作期间保持不变。
"""

from typing import Optional

from .memos_api import IMemosRepository


class ClientSlot:
    """持有当前 Memos 客户端（未配置时为 None）"""

    def __init__(self, client: Optional[IMemosRepository] = None):
        self._client = client
        self._generation = 0

    def get(self) -> Optional[IMemosRepository]:
        return self._client

    @property
    def generation(self) -> int:
        """每次替换递增，便于判断读到的是不是最新的客户端"""
        return self._generation

    def replace(self, client: Optional[IMemosRepository]) -> Optional[IMemosRepository]:
        """
        换入新的客户端。

        :param client: 新客户端，None 表示未配置。
        :return: 被换出的旧客户端，由调用方负责关闭。
        """
        previous, self._client = self._client, client
        self._generation += 1
        return previous
