# app/services/dashboard.py

import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app import schemas
from app.config import Settings
from app.core.constants import RankingCategory, StatsPeriod
from app.crud import matches, players
from app.services.rankings import build_rankings, build_window
from app.services.stats_calculator import aggregate_matches


class StatsDashboardService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def _window(
        self,
        period: StatsPeriod,
        year: Optional[int],
        month: Optional[int],
        reference_date: Optional[datetime.date],
    ):
        return build_window(
            matches.load_all_matches(self.db),
            period,
            reference_date=reference_date or datetime.date.today(),
            year=year,
            month=month,
            settings=self.settings,
        )

    def get_player_stats(
        self,
        period: StatsPeriod = StatsPeriod.FISCAL_YEAR,
        year: Optional[int] = None,
        month: Optional[int] = None,
        reference_date: Optional[datetime.date] = None,
    ) -> schemas.PlayerStatsResponse:
        """
        取得指定區間內每位球員的累計成績與比率型數據。
        """
        window, selected = self._window(period, year, month, reference_date)
        roster = players.load_all_players(self.db)
        return schemas.PlayerStatsResponse(
            window=window,
            players=aggregate_matches(selected, roster),
        )

    def get_rankings(
        self,
        period: StatsPeriod = StatsPeriod.FISCAL_YEAR,
        year: Optional[int] = None,
        month: Optional[int] = None,
        categories: Optional[Iterable[RankingCategory]] = None,
        reference_date: Optional[datetime.date] = None,
    ) -> schemas.RankingsResponse:
        """
        取得指定區間內各項目的排行榜。

        - 打擊率、OPS 只列入達到規定打席的球員。
        - 每個項目列出前 RANKING_SIZE 名，與最後一名同分者全部列出。
        """
        window, selected = self._window(period, year, month, reference_date)
        required_pa, rankings = build_rankings(
            selected,
            categories=categories,
            roster=players.load_all_players(self.db),
            settings=self.settings,
        )
        return schemas.RankingsResponse(
            window=window,
            required_plate_appearances=required_pa,
            rankings=rankings,
        )
