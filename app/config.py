# app/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    # 應用程式主要使用的設定
    DATABASE_URL: str = "sqlite:///./softball_stats.db"

    # 即時同步用的 Redis；未設定時只通知同一行程內的訂閱者
    REDIS_URL: Optional[str] = None
    MATCH_FEED_CHANNEL: str = "softball:matches"
    PLAYER_FEED_CHANNEL: str = "softball:players"

    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # 日誌設定
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True

    # --- 比賽規則 ---
    LINEUP_SIZE: int = 9  # 打順 1~9 為先發，其餘為板凳/代打
    MAX_AT_BATS_PER_INNING: int = 3
    OUTS_PER_INNING: int = 3
    MAX_STOLEN_BASES: int = 3

    # --- 排行榜設定 ---
    RANKING_SIZE: int = 5
    # 規定打席 = min(平均打席 x 比例, 試合數 x 每場打席 x 比例)，至少 1
    QUALIFYING_PA_RATIO: float = 0.7
    QUALIFYING_PA_PER_MATCH: float = 2.5

    # 年度從 4 月開始 (4 月 ~ 隔年 3 月)
    FISCAL_YEAR_START_MONTH: int = 4

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
