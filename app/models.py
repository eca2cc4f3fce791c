# app/models.py

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    JSON,
)
from sqlalchemy.sql import func

from .db import Base

# ==============================================================================
# SQLAlchemy ORM Models (資料庫表格定義)
# ==============================================================================


class PlayerDB(Base):
    __tablename__ = "players"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    batting_order = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class MatchDB(Base):
    __tablename__ = "matches"

    id = Column(String, primary_key=True, index=True)
    match_date = Column(Date, nullable=False, index=True)
    opponent = Column(String, nullable=False)

    # 比賽當下的出場名單快照 (list of Player dict)
    members = Column(JSON, nullable=False, default=list)
    # 以純 JSON 物件儲存的逐局成績：{player_id: {player_id, is_substitute, innings: [...]}}
    stats = Column(JSON, nullable=False, default=dict)
    # 各局壘包狀態：{inning: {base: [player_id, ...]}}
    runners = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
