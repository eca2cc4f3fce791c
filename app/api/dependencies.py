# app/api/dependencies.py

from fastapi import Depends
from sqlalchemy.orm import Session

from app.config import Settings, settings
from app.db import get_db
from app.services.dashboard import StatsDashboardService
from app.services.player import RosterService
from app.services.scoring import ScoringService


def get_settings() -> Settings:
    """
    Settings 的依賴項提供者，直接回傳全域設定實例。
    """
    return settings


def get_scoring_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ScoringService:
    return ScoringService(db=db, settings=settings)


def get_roster_service(db: Session = Depends(get_db)) -> RosterService:
    return RosterService(db=db)


def get_stats_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> StatsDashboardService:
    """
    StatsDashboardService 的依賴項提供者。
    """
    return StatsDashboardService(db=db, settings=settings)
