"""Routes for creating, joining, configuring and starting rooms."""
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response, status

from core.constants import CUSTOM_PRESET
from core.exceptions import GameError, RoleConfigurationError
from core.player import Player
from core.role_config import RoleConfiguration
from core.room import GameState, Room
from core.room_manager import RoomManager
from models.requests import JoinRoomRequest, LeaderlessRequest, PresetRequest, RoleCountRequest
from models.responses import (
    JoinRoomResponse,
    PlayerResponse,
    RoleDefinitionResponse,
    RoomStateResponse,
    StartGameResponse,
)
from services.lobby import can_join, run_countdown, start_game
from services.role_config_service import RoleConfigService

router = APIRouter(prefix="/api")


def get_room_manager(request: Request) -> RoomManager:
    return request.app.state.room_manager


def get_role_service(request: Request) -> RoleConfigService:
    return request.app.state.role_service


def get_room(code: str, manager: RoomManager = Depends(get_room_manager)) -> Room:
    """Resolve the room named in the path.

    Raises:
        HTTPException: If room not found
    """
    room = manager.get_room(code)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return room


def _editable_config(room: Room, role_service: RoleConfigService) -> RoleConfiguration:
    """Return a copy of the room's configuration for editing.

    Raises:
        HTTPException: If the game has already started
    """
    if room.get_state() != GameState.LOBBY:
        raise HTTPException(status_code=400, detail="Game has already started")
    if room.role_config is None:
        return role_service.create_default_configuration()
    return room.role_config.model_copy(deep=True)


@router.post("/rooms", response_model=RoomStateResponse, status_code=status.HTTP_201_CREATED)
async def create_room(manager: RoomManager = Depends(get_room_manager)):
    """Create a new room in the lobby state.

    Returns:
        The new room's state
    """
    room = manager.create_room()
    return room.to_dict()


@router.get("/rooms/{code}", response_model=RoomStateResponse)
async def get_room_state(room: Room = Depends(get_room)):
    return room.to_dict()


@router.post("/rooms/{code}/join", response_model=JoinRoomResponse, status_code=status.HTTP_201_CREATED)
async def join_room(join_request: JoinRoomRequest, room: Room = Depends(get_room)):
    """Add a player to the room.

    Args:
        join_request: Player's name and whether they host
        room: The room from the path

    Returns:
        The new player and their session ID

    Raises:
        HTTPException: If the player cannot join
    """
    allowed, error = can_join(room, join_request.name, join_request.is_host)
    if not allowed:
        raise HTTPException(status_code=400, detail=error)

    player = Player(join_request.name, is_host=join_request.is_host)
    try:
        room.add_player(player)
    except GameError as e:
        # Another player may have taken the last seat since the check
        raise HTTPException(status_code=400, detail=str(e)) from e

    return {"player": player.to_dict(include_role=True), "session_id": player.session_id}


@router.get("/rooms/{code}/players/{player_id}", response_model=PlayerResponse)
async def get_player(player_id: str, room: Room = Depends(get_room)):
    """Return one player including their own role."""
    player = room.get_player(player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return player.to_dict(include_role=True)


@router.delete("/rooms/{code}/players/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def leave_room(player_id: str, room: Room = Depends(get_room)):
    room.remove_player(player_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/rooms/{code}/validation")
async def get_validation(room: Room = Depends(get_room), role_service: RoleConfigService = Depends(get_role_service)):
    """Report whether the room can start right now."""
    return room.get_validation_state(role_service).model_dump(mode="json", by_alias=True)


@router.put("/rooms/{code}/roles")
async def replace_role_config(
    config: RoleConfiguration,
    room: Room = Depends(get_room),
    role_service: RoleConfigService = Depends(get_role_service),
):
    """Replace the room's role configuration.

    Raises:
        HTTPException: If the game has started or the configuration is invalid
    """
    _editable_config(room, role_service)
    try:
        role_service.validate_configuration(config)
    except RoleConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    room.set_role_config(config)
    return config.model_dump(mode="json", by_alias=True)


@router.post("/rooms/{code}/roles/preset")
async def apply_preset(
    preset_request: PresetRequest,
    room: Room = Depends(get_room),
    role_service: RoleConfigService = Depends(get_role_service),
    manager: RoomManager = Depends(get_room_manager),
):
    """Switch the room to a preset sized for the given or current player count."""
    current = _editable_config(room, role_service)
    player_count = preset_request.player_count or room.get_active_player_count() or manager.settings.default_game_size

    if preset_request.preset == CUSTOM_PRESET:
        current.preset_name = CUSTOM_PRESET
        role_service.update_player_limits(current)
        room.set_role_config(current)
        return current.model_dump(mode="json", by_alias=True)

    try:
        config = role_service.create_from_preset(preset_request.preset, player_count)
    except RoleConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    config.allow_leaderless_game = current.allow_leaderless_game
    config.hide_role_distribution = current.hide_role_distribution
    config.fully_random_roles = current.fully_random_roles
    room.set_role_config(config)
    return config.model_dump(mode="json", by_alias=True)


@router.post("/rooms/{code}/roles/count")
async def change_role_count(
    count_request: RoleCountRequest,
    room: Room = Depends(get_room),
    role_service: RoleConfigService = Depends(get_role_service),
):
    """Add or remove copies of one role type. The room becomes custom."""
    config = _editable_config(room, role_service)
    try:
        role_service.adjust_role_count(config, count_request.role_type, count_request.delta)
    except RoleConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    room.set_role_config(config)
    return config.model_dump(mode="json", by_alias=True)


@router.post("/rooms/{code}/roles/leaderless")
async def set_leaderless(
    leaderless_request: LeaderlessRequest,
    room: Room = Depends(get_room),
    role_service: RoleConfigService = Depends(get_role_service),
):
    config = _editable_config(room, role_service)
    role_service.set_leaderless(config, leaderless_request.allow_leaderless)
    room.set_role_config(config)
    return config.model_dump(mode="json", by_alias=True)


@router.post("/rooms/{code}/start", response_model=StartGameResponse)
async def start_room(
    request: Request,
    background_tasks: BackgroundTasks,
    room: Room = Depends(get_room),
    role_service: RoleConfigService = Depends(get_role_service),
):
    """Deal roles and begin the countdown.

    Raises:
        HTTPException: If the room cannot start, with the validation message
    """
    started, validation = start_game(room, request.app.state.card_pool, role_service)
    if not started:
        detail = validation.validation_message or "Game has already started"
        raise HTTPException(status_code=400, detail=detail)

    background_tasks.add_task(run_countdown, room, request.app.state.countdown_interval)
    return {
        "started": True,
        "state": room.get_state().value,
        "validation": validation.model_dump(mode="json", by_alias=True),
    }


@router.post("/rooms/{code}/end", response_model=RoomStateResponse)
async def end_room(room: Room = Depends(get_room)):
    if not room.transition_to(GameState.ENDED):
        raise HTTPException(status_code=400, detail="Game is not in progress")
    return room.to_dict()


@router.get("/roles", response_model=list[RoleDefinitionResponse])
async def list_roles(role_service: RoleConfigService = Depends(get_role_service)):
    """List role definitions in setup screen order."""
    return [
        {
            "name": name,
            "display_name": definition.display_name,
            "category": definition.category.value,
            "always_revealed": definition.always_revealed,
        }
        for name, definition in role_service.get_sorted_roles()
    ]


@router.get("/presets")
async def list_presets(role_service: RoleConfigService = Depends(get_role_service)):
    return role_service.preset_names()


@router.get("/stats")
async def get_stats(manager: RoomManager = Depends(get_room_manager)):
    return manager.get_stats()
