# app/core/constants.py

"""
本檔案用於存放整個應用程式中可複用的常數，特別是與壘球記錄規則相關的分類。
"""

import enum


# ==============================================================================
# 打席結果 (At-Bat Outcomes) - 由使用者在記錄畫面上選擇
# ==============================================================================


class Outcome(str, enum.Enum):
    OUT = "out"
    OUT_RBI = "out-rbi"  # 出局但有打點 (滾地球期間跑者回壘等)
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    HOMERUN = "homerun"
    WALK = "walk"
    DEAD_BALL = "dead-ball"  # 觸身球，計入四死球
    STOLEN_BASE = "stolen-base"
    SACRIFICE_BUNT = "sacrifice-bunt"
    SACRIFICE_FLY = "sacrifice-fly"
    ERROR = "error"  # 因對方失誤上壘


# --- 安打類 (Hits) 與推進壘數 ---
BASES_FOR_HIT = {
    Outcome.SINGLE: 1,
    Outcome.DOUBLE: 2,
    Outcome.TRIPLE: 3,
    Outcome.HOMERUN: 4,
}

# --- 打者上一壘的結果 (安打中只有全壘打例外) ---
BATTER_TO_FIRST = {
    Outcome.SINGLE,
    Outcome.DOUBLE,
    Outcome.TRIPLE,
    Outcome.WALK,
    Outcome.DEAD_BALL,
}

# 所有可累加的計數欄位 (AtBatRecord 與彙總數據共用)
COUNTER_FIELDS = (
    "at_bats",
    "hits",
    "doubles",
    "triples",
    "home_runs",
    "walks",
    "dead_balls",
    "stolen_bases",
    "sacrifice_bunts",
    "sacrifice_flies",
    "errors_reached",
    "runs",
    "rbis",
)

BASES = (1, 2, 3)


# ==============================================================================
# 排行榜與統計區間
# ==============================================================================


class RankingCategory(str, enum.Enum):
    BATTING_AVERAGE = "batting_average"
    OPS = "ops"
    HITS = "hits"
    RBIS = "rbis"
    STOLEN_BASES = "stolen_bases"
    HOME_RUNS = "home_runs"
    RUNS = "runs"


# 比率型數據需達規定打席才列入排行
RATE_CATEGORIES = {RankingCategory.BATTING_AVERAGE, RankingCategory.OPS}


class StatsPeriod(str, enum.Enum):
    MONTH = "month"
    FISCAL_YEAR = "fiscal_year"
    ALL = "all"
