# app/api/players.py

from typing import List

from fastapi import APIRouter, Depends, status

from app import schemas
from app.api.dependencies import get_roster_service
from app.services.player import RosterService

router = APIRouter(
    prefix="/api/players",
    tags=["Players"],
)


@router.get("", response_model=List[schemas.Player])
def list_players(service: RosterService = Depends(get_roster_service)):
    """
    取得全隊名單，依打順排序 (未設定打順者排在最後)。
    """
    return service.list_players()


@router.post(
    "",
    response_model=schemas.Player,
    status_code=status.HTTP_201_CREATED,
)
def create_player(
    player_in: schemas.PlayerCreate,
    service: RosterService = Depends(get_roster_service),
):
    return service.create_player(player_in)


@router.get("/{player_id}", response_model=schemas.Player)
def get_player(player_id: str, service: RosterService = Depends(get_roster_service)):
    return service.get_player(player_id)


@router.put("/{player_id}", response_model=schemas.Player)
def update_player(
    player_id: str,
    player_in: schemas.PlayerUpdate,
    service: RosterService = Depends(get_roster_service),
):
    return service.update_player(player_id, player_in)


@router.delete("/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_player(player_id: str, service: RosterService = Depends(get_roster_service)):
    service.delete_player(player_id)
