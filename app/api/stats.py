# app/api/stats.py

import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_stats_service
from app.core.constants import RankingCategory, StatsPeriod
from app.schemas import PlayerStatsResponse, RankingsResponse
from app.services.dashboard import StatsDashboardService

router = APIRouter(
    prefix="/api/stats",
    tags=["Stats"],
)


@router.get(
    "/players",
    response_model=PlayerStatsResponse,
    summary="Get Player Stats",
    description="""
    取得指定區間內每位球員的累計成績。

    - `period=month`：指定 `year` 與 `month`，未指定時為本月。
    - `period=fiscal_year`：年度從 4 月開始，`year` 為年度起始年。
    - `period=all`：所有比賽。
    """,
)
def get_player_stats(
    period: StatsPeriod = StatsPeriod.FISCAL_YEAR,
    year: Optional[int] = Query(None, ge=1900),
    month: Optional[int] = Query(None, ge=1, le=12),
    reference_date: Optional[datetime.date] = None,
    service: StatsDashboardService = Depends(get_stats_service),
) -> PlayerStatsResponse:
    return service.get_player_stats(period, year, month, reference_date)


@router.get("/rankings", response_model=RankingsResponse)
def get_rankings(
    period: StatsPeriod = StatsPeriod.FISCAL_YEAR,
    year: Optional[int] = Query(None, ge=1900),
    month: Optional[int] = Query(None, ge=1, le=12),
    categories: Optional[List[RankingCategory]] = Query(
        None,
        alias="category",
        description="要計算的排行項目，未指定時使用預設的五個項目",
    ),
    reference_date: Optional[datetime.date] = None,
    service: StatsDashboardService = Depends(get_stats_service),
) -> RankingsResponse:
    """
    取得指定區間內各項目的前五名 (同分者全部列出)。
    """
    return service.get_rankings(period, year, month, categories, reference_date)
