# app/services/rankings.py

import calendar
import datetime
import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from app.config import Settings, settings as default_settings
from app.core.constants import RATE_CATEGORIES, RankingCategory, StatsPeriod
from app.exceptions import InvalidInputException
from app.schemas import (
    AggregatedPlayerStat,
    Match,
    Player,
    Ranking,
    RankingEntry,
    StatsWindow,
)
from app.services.stats_calculator import aggregate_matches, format_rate

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = (
    RankingCategory.BATTING_AVERAGE,
    RankingCategory.HITS,
    RankingCategory.RBIS,
    RankingCategory.OPS,
    RankingCategory.STOLEN_BASES,
)


def _ceil(value: float) -> int:
    # 先四捨五入到小數第 9 位，避免 0.7 * 10 = 7.000000000000001 這類浮點誤差
    return math.ceil(round(value, 9))


# ==============================================================================
# 統計區間 (月 / 年度 / 全部)
# ==============================================================================


def fiscal_year_of(day: datetime.date, start_month: int = 4) -> int:
    """年度以起始月份切分，例如 4 月起算時 2025-03-31 屬於 2024 年度。"""
    return day.year if day.month >= start_month else day.year - 1


def resolve_window(
    period: StatsPeriod,
    reference_date: Optional[datetime.date] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    settings: Settings = default_settings,
) -> Tuple[Optional[datetime.date], Optional[datetime.date], str]:
    """
    計算統計區間的起訖日 (含) 與顯示標籤。

    未指定 year / month 時，以 reference_date (預設今天) 所在的月份或年度為準。
    """
    reference_date = reference_date or datetime.date.today()
    start_month = settings.FISCAL_YEAR_START_MONTH

    if period == StatsPeriod.ALL:
        return None, None, "全部"

    if period == StatsPeriod.MONTH:
        if month is not None and year is None:
            raise InvalidInputException(
                message="'year' is required when 'month' is set."
            )
        year = year if year is not None else reference_date.year
        month = month if month is not None else reference_date.month
        if not 1 <= month <= 12:
            raise InvalidInputException(message=f"Invalid month: {month}")
        last_day = calendar.monthrange(year, month)[1]
        return (
            datetime.date(year, month, 1),
            datetime.date(year, month, last_day),
            f"{year}年{month}月",
        )

    fiscal_year = (
        year if year is not None else fiscal_year_of(reference_date, start_month)
    )
    start = datetime.date(fiscal_year, start_month, 1)
    end = datetime.date(fiscal_year + 1, start_month, 1) - datetime.timedelta(days=1)
    return start, end, f"{fiscal_year}年度"


def filter_matches(
    matches: Iterable[Match],
    start: Optional[datetime.date],
    end: Optional[datetime.date],
) -> List[Match]:
    return [
        m
        for m in matches
        if (start is None or m.match_date >= start)
        and (end is None or m.match_date <= end)
    ]


def build_window(
    matches: Sequence[Match],
    period: StatsPeriod,
    reference_date: Optional[datetime.date] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    settings: Settings = default_settings,
) -> Tuple[StatsWindow, List[Match]]:
    start, end, label = resolve_window(period, reference_date, year, month, settings)
    selected = filter_matches(matches, start, end)
    window = StatsWindow(
        period=period,
        start_date=start,
        end_date=end,
        label=label,
        match_count=len(selected),
    )
    return window, selected


# ==============================================================================
# 規定打席與排行榜
# ==============================================================================


def required_plate_appearances(
    player_stats: Sequence[AggregatedPlayerStat],
    match_count: int,
    ratio: float = 0.7,
    per_match: float = 2.5,
) -> int:
    """
    規定打席 = max(1, min(ceil(平均打席 x 比例), ceil(比例 x 試合數 x 每場打席)))

    平均打席只計算至少有 1 個打席的球員。
    """
    appearances = [s.plate_appearances for s in player_stats if s.plate_appearances > 0]
    mean_pa = sum(appearances) / len(appearances) if appearances else 0.0

    by_average = _ceil(mean_pa * ratio)
    by_matches = _ceil(ratio * match_count * per_match)
    return max(1, min(by_average, by_matches))


def category_value(stat: AggregatedPlayerStat, category: RankingCategory):
    """比率型數據使用四捨五入到小數第 3 位後的顯示值，讓同分判定與畫面一致。"""
    return getattr(stat, category.value)


def rank_players(
    player_stats: Sequence[AggregatedPlayerStat],
    category: RankingCategory,
    required_pa: Optional[int] = None,
    size: int = 5,
) -> List[RankingEntry]:
    """
    產生單一項目的排行榜。

    1. 比率型數據只納入達到規定打席的球員
    2. 依數值由大到小排序，數值為 0 的球員不列入
    3. 取第 size 名的數值，所有大於等於該數值的球員都列入 (同分者全部列出)
    4. 名次採標準競賽排名：同分同名次，下一個名次跳過同分人數
    """
    candidates = list(player_stats)
    if category in RATE_CATEGORIES and required_pa is not None:
        candidates = [s for s in candidates if s.plate_appearances >= required_pa]

    ordered = sorted(
        (s for s in candidates if category_value(s, category) > 0),
        key=lambda s: (-category_value(s, category), s.name or "", s.player_id),
    )
    if len(ordered) > size:
        cutoff = category_value(ordered[size - 1], category)
        ordered = [s for s in ordered if category_value(s, category) >= cutoff]

    entries: List[RankingEntry] = []
    for index, stat in enumerate(ordered):
        value = category_value(stat, category)
        if entries and entries[-1].value == value:
            rank = entries[-1].rank
        else:
            rank = index + 1
        display = format_rate(value) if category in RATE_CATEGORIES else str(value)
        entries.append(
            RankingEntry(
                rank=rank,
                player_id=stat.player_id,
                name=stat.name,
                value=value,
                display=display,
            )
        )
    return entries


def build_rankings(
    matches: Sequence[Match],
    categories: Optional[Iterable[RankingCategory]] = None,
    roster: Optional[Iterable[Player]] = None,
    settings: Settings = default_settings,
) -> Tuple[int, List[Ranking]]:
    """
    對一組比賽計算各項目的排行榜。

    Returns:
        (規定打席, 各項目排行榜列表)
    """
    player_stats = aggregate_matches(matches, roster)
    required_pa = required_plate_appearances(
        player_stats,
        len(matches),
        ratio=settings.QUALIFYING_PA_RATIO,
        per_match=settings.QUALIFYING_PA_PER_MATCH,
    )

    rankings = []
    for category in categories or DEFAULT_CATEGORIES:
        is_rate = category in RATE_CATEGORIES
        rankings.append(
            Ranking(
                category=category,
                required_plate_appearances=required_pa if is_rate else None,
                entries=rank_players(
                    player_stats,
                    category,
                    required_pa=required_pa if is_rate else None,
                    size=settings.RANKING_SIZE,
                ),
            )
        )
    logger.info(
        f"已計算 {len(matches)} 場比賽、{len(player_stats)} 名球員的排行榜，"
        f"規定打席 {required_pa}。"
    )
    return required_pa, rankings
