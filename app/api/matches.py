# app/api/matches.py

from typing import List

from fastapi import APIRouter, Depends, Path, status

from app import schemas
from app.api.dependencies import get_scoring_service
from app.services.scoring import ScoringService

router = APIRouter(
    prefix="/api/matches",
    tags=["Matches"],
)


# --- 比賽管理 ---


@router.get("", response_model=List[schemas.Match])
def list_matches(service: ScoringService = Depends(get_scoring_service)):
    """
    取得所有比賽 (依日期排序)，包含完整的逐局成績。
    """
    return service.list_matches()


@router.post(
    "",
    response_model=schemas.Match,
    status_code=status.HTTP_201_CREATED,
)
def create_match(
    match_in: schemas.MatchCreate,
    service: ScoringService = Depends(get_scoring_service),
):
    return service.create_match(match_in)


@router.get("/{match_id}", response_model=schemas.Match)
def get_match(match_id: str, service: ScoringService = Depends(get_scoring_service)):
    return service.get_match(match_id)


@router.delete("/{match_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_match(match_id: str, service: ScoringService = Depends(get_scoring_service)):
    service.delete_match(match_id)


@router.put("/{match_id}/members", response_model=schemas.Match)
def update_members(
    match_id: str,
    body: schemas.MatchMembersUpdate,
    service: ScoringService = Depends(get_scoring_service),
):
    """
    更新出場名單。被移出名單的球員，其本場成績會一併刪除。
    """
    return service.update_members(match_id, body.members)


# --- 打席記錄 ---


@router.put(
    "/{match_id}/at-bats",
    response_model=schemas.OutcomeResolution,
    summary="Record At-Bat Outcome",
    description="""
    記錄 (或清除) 一個打席結果，並回傳更新後的比賽與得分跑者。

    - `outcome` 留空代表清除該打席。
    - 安打會推進壘上跑者，回到本壘的跑者記 1 分。
    - `dropped_runs` 列出在該局沒有打席紀錄、因此無法記分的跑者。
    """,
)
def record_outcome(
    match_id: str,
    body: schemas.RecordOutcomeRequest,
    service: ScoringService = Depends(get_scoring_service),
):
    return service.record_outcome(match_id, body)


@router.post(
    "/{match_id}/at-bats",
    response_model=schemas.Match,
    status_code=status.HTTP_201_CREATED,
)
def add_at_bat(
    match_id: str,
    body: schemas.AddAtBatRequest,
    service: ScoringService = Depends(get_scoring_service),
):
    """
    在同一局為球員新增一個空打席 (打者一巡時使用)。
    """
    return service.add_at_bat(match_id, body)


@router.delete(
    "/{match_id}/at-bats/{player_id}/{inning_number}/{at_bat_index}",
    response_model=schemas.Match,
)
def remove_at_bat(
    match_id: str,
    player_id: str,
    inning_number: int = Path(..., ge=1),
    at_bat_index: int = Path(..., ge=0),
    service: ScoringService = Depends(get_scoring_service),
):
    return service.remove_at_bat(match_id, player_id, inning_number, at_bat_index)


@router.patch("/{match_id}/stolen-bases", response_model=schemas.Match)
def update_stolen_bases(
    match_id: str,
    body: schemas.StolenBasesRequest,
    service: ScoringService = Depends(get_scoring_service),
):
    return service.update_stolen_bases(match_id, body)


# --- 代打 ---


@router.post("/{match_id}/substitutes", response_model=schemas.Match)
def add_substitute(
    match_id: str,
    body: schemas.SubstituteRequest,
    service: ScoringService = Depends(get_scoring_service),
):
    return service.add_substitute(match_id, body.player_id)


@router.delete("/{match_id}/substitutes/{player_id}", response_model=schemas.Match)
def remove_substitute(
    match_id: str,
    player_id: str,
    service: ScoringService = Depends(get_scoring_service),
):
    """
    取消代打登錄，並刪除該球員在本場比賽的所有打席紀錄。
    """
    return service.remove_substitute(match_id, player_id)


# --- 查詢 ---


@router.get(
    "/{match_id}/players/{player_id}/totals",
    response_model=schemas.AggregatedPlayerStat,
)
def get_player_totals(
    match_id: str,
    player_id: str,
    service: ScoringService = Depends(get_scoring_service),
):
    return service.get_player_totals(match_id, player_id)


@router.get("/{match_id}/innings/{inning_number}", response_model=schemas.InningStatus)
def get_inning_status(
    match_id: str,
    inning_number: int = Path(..., ge=1),
    service: ScoringService = Depends(get_scoring_service),
):
    return service.get_inning_status(match_id, inning_number)
