# app/schemas.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional, Union
import datetime

from app.core.constants import Outcome, RankingCategory, StatsPeriod

# 壘包狀態：壘號 (1, 2, 3) -> 壘上跑者 ID (依上壘順序)
BaseOccupancy = Dict[int, List[str]]


# ==============================================================================
# 1. 球員 (Roster)
# ==============================================================================


class Player(BaseModel):
    id: str
    name: str
    batting_order: Optional[int] = Field(
        None, ge=0, description="打順；1~9 為先發，10 以上或未設定為板凳"
    )

    model_config = ConfigDict(from_attributes=True)


class PlayerCreate(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    batting_order: Optional[int] = Field(None, ge=0)


class PlayerUpdate(BaseModel):
    name: str = Field(..., min_length=1)
    batting_order: Optional[int] = Field(None, ge=0)


# ==============================================================================
# 2. 打席紀錄 (At-Bat Records)
# ==============================================================================


class AtBatRecord(BaseModel):
    """單一打席的結果與計數。outcome 為 None 代表尚未選擇結果的空打席。"""

    inning_number: int = Field(..., ge=1)
    at_bat_sequence: int = Field(1, ge=1, description="同一局內該球員的第幾個打席")
    batting_order: Optional[int] = None
    outcome: Optional[Outcome] = None

    at_bats: int = Field(0, ge=0)
    hits: int = Field(0, ge=0)
    doubles: int = Field(0, ge=0)
    triples: int = Field(0, ge=0)
    home_runs: int = Field(0, ge=0)
    walks: int = Field(0, ge=0)
    dead_balls: int = Field(0, ge=0)
    stolen_bases: int = Field(0, ge=0)
    sacrifice_bunts: int = Field(0, ge=0)
    sacrifice_flies: int = Field(0, ge=0)
    errors_reached: int = Field(0, ge=0)
    runs: int = Field(0, ge=0)
    rbis: int = Field(0, ge=0)


class PlayerInningHistory(BaseModel):
    player_id: str
    is_substitute: bool = False
    innings: List[AtBatRecord] = []


# ==============================================================================
# 3. 比賽 (Matches)
# ==============================================================================


class MatchBase(BaseModel):
    match_date: datetime.date
    opponent: str = Field(..., min_length=1)


class MatchCreate(MatchBase):
    id: Optional[str] = None
    members: List[Player] = []


class MatchMembersUpdate(BaseModel):
    members: List[Player]


class Match(MatchBase):
    id: str
    members: List[Player] = []
    stats: Dict[str, PlayerInningHistory] = {}
    runners: Dict[int, BaseOccupancy] = {}
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None


# ==============================================================================
# 4. 記錄操作的請求/回應
# ==============================================================================


class RecordOutcomeRequest(BaseModel):
    player_id: str
    inning_number: int = Field(..., ge=1)
    at_bat_index: int = Field(0, ge=0, description="同一局內的打席索引 (從 0 開始)")
    outcome: Optional[Outcome] = Field(None, description="留空代表清除結果")
    rbi: int = Field(0, ge=0)


class AddAtBatRequest(BaseModel):
    player_id: str
    inning_number: int = Field(..., ge=1)


class StolenBasesRequest(BaseModel):
    player_id: str
    inning_number: int = Field(..., ge=1)
    delta: int


class SubstituteRequest(BaseModel):
    player_id: str


class OutcomeResolution(BaseModel):
    match: Match
    record: Optional[AtBatRecord] = None
    scored_runners: List[str] = []
    dropped_runs: List[str] = Field(
        [], description="得分但在該局沒有打席紀錄的跑者，其得分未被記錄"
    )


class InningStatus(BaseModel):
    inning_number: int
    outs: int
    closed_batting_orders: List[int] = []
    can_add_at_bat: Dict[str, bool] = {}
    runners: BaseOccupancy = {}


# ==============================================================================
# 5. 統計與排行榜
# ==============================================================================


class AggregatedPlayerStat(BaseModel):
    player_id: str
    name: Optional[str] = None
    games: int = 0

    at_bats: int = 0
    hits: int = 0
    doubles: int = 0
    triples: int = 0
    home_runs: int = 0
    walks: int = 0
    dead_balls: int = 0
    stolen_bases: int = 0
    sacrifice_bunts: int = 0
    sacrifice_flies: int = 0
    errors_reached: int = 0
    runs: int = 0
    rbis: int = 0

    plate_appearances: int = 0
    total_bases: int = 0
    batting_average: float = 0.0
    slugging_percentage: float = 0.0
    on_base_percentage: float = 0.0
    ops: float = 0.0


class RankingEntry(BaseModel):
    rank: int
    player_id: str
    name: Optional[str] = None
    value: Union[int, float]
    display: str = Field("", description="顯示用數值，比率型為 .333 格式")


class Ranking(BaseModel):
    category: RankingCategory
    required_plate_appearances: Optional[int] = Field(
        None, description="僅比率型數據有規定打席"
    )
    entries: List[RankingEntry] = []


class StatsWindow(BaseModel):
    period: StatsPeriod
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    label: str
    match_count: int


class PlayerStatsResponse(BaseModel):
    window: StatsWindow
    players: List[AggregatedPlayerStat]


class RankingsResponse(BaseModel):
    window: StatsWindow
    required_plate_appearances: int
    rankings: List[Ranking]
