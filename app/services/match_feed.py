# app/services/match_feed.py

import json
import logging
from typing import Callable, List, Optional, Sequence

import redis
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from app.config import settings

logger = logging.getLogger(__name__)

Subscriber = Callable[[List[BaseModel]], None]


def _connect_redis(url: Optional[str]):
    """建立 Redis 連線；未設定或無法連線時回傳 None，只做行程內通知。"""
    if not url:
        return None
    try:
        client = redis.from_url(url, decode_responses=True)
        client.ping()
        logger.info("成功連接至 Redis，即時同步將透過 pub/sub 廣播。")
        return client
    except redis.exceptions.ConnectionError as e:
        logger.error(f"無法連接至 Redis，僅通知本行程的訂閱者: {e}", exc_info=True)
        return None


class ChangeFeed:
    """
    儲存層的變更通知。

    每次寫入成功後，以「整份快照」(所有比賽或所有球員) 通知訂閱者；
    訂閱者直接以快照取代本地狀態，不做欄位層級的合併。
    若有設定 Redis，同時將快照廣播到對應的頻道，供其他行程訂閱。
    """

    def __init__(self, name: str, channel: str, redis_client=None):
        self.name = name
        self.channel = channel
        self.redis_client = redis_client
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """註冊訂閱者，回傳取消訂閱的函式。"""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, snapshot: Sequence[BaseModel]):
        """
        將快照送給所有訂閱者。單一訂閱者失敗只記錄錯誤，不影響寫入流程。
        """
        snapshot = list(snapshot)
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(
                    f"[{self.name}] 訂閱者處理快照時發生錯誤: {e}", exc_info=True
                )

        if self.redis_client is None:
            return
        try:
            payload = json.dumps(jsonable_encoder(snapshot), ensure_ascii=False)
            self.redis_client.publish(self.channel, payload)
        except redis.exceptions.RedisError as e:
            logger.warning(f"[{self.name}] Redis 廣播失敗 ({e})，略過跨行程同步。")


redis_client = _connect_redis(settings.REDIS_URL)

match_feed = ChangeFeed("matches", settings.MATCH_FEED_CHANNEL, redis_client)
player_feed = ChangeFeed("players", settings.PLAYER_FEED_CHANNEL, redis_client)
