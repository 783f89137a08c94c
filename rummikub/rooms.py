"""Room bookkeeping around the turn engine.

A ``RoomRegistry`` is created once by the hosting process and passed to every
handler. Each room carries its own re-entrant lock; ``registry.locked(code)``
serializes engine calls within a room while rooms proceed independently.

Lock order is always room lock first, then the registry lock. The registry
lock is never held while waiting on a room lock.
"""

from __future__ import annotations

import logging
import random
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .engine import Game
from .errors import ActionResult, ErrorKind
from .rules import Ruleset
from .state import PlayerView

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6


class RoomStatus(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass
class RoomMember:
    id: str
    name: str
    is_connected: bool = True


@dataclass
class Room:
    code: str
    host_id: str
    members: Dict[str, RoomMember] = field(default_factory=dict)
    status: RoomStatus = RoomStatus.WAITING
    game: Optional[Game] = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)


@dataclass(frozen=True)
class RoomView:
    code: str
    players: Tuple[PlayerView, ...]
    host_id: str
    status: RoomStatus
    max_players: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "players": [p.to_dict() for p in self.players],
            "host_id": self.host_id,
            "status": self.status.value,
            "max_players": self.max_players,
        }


class RoomRegistry:
    def __init__(self, ruleset: Ruleset | None = None, rng_seed: Optional[int] = None) -> None:
        self.ruleset = ruleset or Ruleset()
        self._rng = random.Random(rng_seed)
        self._rooms: Dict[str, Room] = {}
        self._player_to_room: Dict[str, str] = {}
        self._lock = threading.RLock()

    def _generate_code(self) -> str:
        while True:
            code = "".join(self._rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))
            if code not in self._rooms:
                return code

    def _room(self, code: Optional[str]) -> Optional[Room]:
        if code is None:
            return None
        with self._lock:
            return self._rooms.get(code)

    def _is_registered(self, room: Room) -> bool:
        # a room can be closed between lookup and acquiring its lock
        with self._lock:
            return self._rooms.get(room.code) is room

    @contextmanager
    def locked(self, code: str) -> Iterator[Optional[Game]]:
        """Hold the room's lock and yield its game (``None`` before start).

        Raises ``KeyError`` when ``code`` names no open room, including a room
        closed while waiting for its lock. Callers serialize engine calls here
        after resolving the room, so an unknown code is a caller bug rather
        than a player-facing rejection.
        """
        room = self._room(code)
        if room is None:
            raise KeyError(f"unknown room {code!r}")
        with room.lock:
            if not self._is_registered(room):
                raise KeyError(f"unknown room {code!r}")
            yield room.game

    def create_room(self, host_id: str, host_name: str) -> str:
        with self._lock:
            if host_id in self._player_to_room:
                raise ValueError(f"player {host_id!r} is already in room {self._player_to_room[host_id]}")
            code = self._generate_code()
            room = Room(code=code, host_id=host_id)
            room.members[host_id] = RoomMember(host_id, host_name)
            self._rooms[code] = room
            self._player_to_room[host_id] = code
        logger.info("room %s created by %s", code, host_id)
        return code

    def join_room(self, code: str, player_id: str, player_name: str) -> ActionResult:
        room = self._room(code)
        if room is None:
            return ActionResult.fail(ErrorKind.LOOKUP, "Room not found")
        with room.lock:
            if not self._is_registered(room):
                return ActionResult.fail(ErrorKind.LOOKUP, "Room not found")
            if room.status != RoomStatus.WAITING:
                return ActionResult.fail(ErrorKind.RULE, "Game already in progress")
            if len(room.members) >= self.ruleset.max_players:
                return ActionResult.fail(ErrorKind.RULE, "Room is full")
            with self._lock:
                if player_id in self._player_to_room:
                    return ActionResult.fail(ErrorKind.RULE, "Already in a room")
                room.members[player_id] = RoomMember(player_id, player_name)
                self._player_to_room[player_id] = code
        logger.info("%s joined room %s", player_id, code)
        return ActionResult.ok()

    def leave_room(self, player_id: str) -> ActionResult:
        room = self._room(self.get_player_room(player_id))
        if room is None:
            return ActionResult.fail(ErrorKind.LOOKUP, "Not in a room")
        with room.lock:
            if not self._is_registered(room):
                return ActionResult.fail(ErrorKind.LOOKUP, "Not in a room")
            with self._lock:
                room.members.pop(player_id, None)
                self._player_to_room.pop(player_id, None)
                if not room.members:
                    del self._rooms[room.code]
                    logger.info("room %s closed", room.code)
                    return ActionResult.ok()
                if room.host_id == player_id:
                    room.host_id = next(iter(room.members))
                    logger.info("room %s host passed to %s", room.code, room.host_id)
            if room.game is not None:
                room.game.remove_player(player_id)
        return ActionResult.ok()

    def set_player_connected(self, player_id: str, connected: bool) -> ActionResult:
        room = self._room(self.get_player_room(player_id))
        if room is None:
            return ActionResult.fail(ErrorKind.LOOKUP, "Not in a room")
        with room.lock:
            if not self._is_registered(room):
                return ActionResult.fail(ErrorKind.LOOKUP, "Not in a room")
            member = room.members.get(player_id)
            if member is not None:
                member.is_connected = connected
            if room.game is not None:
                room.game.set_player_connected(player_id, connected)
        return ActionResult.ok()

    def start_game(self, code: str, requester_id: str) -> ActionResult:
        room = self._room(code)
        if room is None:
            return ActionResult.fail(ErrorKind.LOOKUP, "Room not found")
        with room.lock:
            if not self._is_registered(room):
                return ActionResult.fail(ErrorKind.LOOKUP, "Room not found")
            if room.host_id != requester_id:
                return ActionResult.fail(ErrorKind.RULE, "Only the host can start the game")
            if len(room.members) < self.ruleset.min_players:
                return ActionResult.fail(
                    ErrorKind.RULE, f"Need at least {self.ruleset.min_players} players to start"
                )
            if room.status != RoomStatus.WAITING:
                return ActionResult.fail(ErrorKind.RULE, "Game already started")

            game = Game(self.ruleset, rng_seed=self._rng.randrange(2**32))
            for member in room.members.values():
                game.add_player(member.id, member.name)
                game.set_player_connected(member.id, member.is_connected)
            game.start_turn()
            room.game = game
            room.status = RoomStatus.PLAYING
        logger.info("room %s started with %d players", code, len(room.members))
        return ActionResult.ok()

    def end_game(self, code: str) -> None:
        room = self._room(code)
        if room is None:
            return
        with room.lock:
            room.status = RoomStatus.FINISHED
        logger.info("room %s finished", code)

    def get_room(self, code: str) -> Optional[RoomView]:
        room = self._room(code)
        if room is None:
            return None
        with room.lock:
            views = []
            for member in room.members.values():
                player = room.game.players.get(member.id) if room.game else None
                views.append(
                    PlayerView(
                        id=member.id,
                        name=member.name,
                        tile_count=len(player.tiles) if player else 0,
                        is_connected=member.is_connected,
                        has_initial_meld=player.has_initial_meld if player else False,
                    )
                )
            return RoomView(
                code=room.code,
                players=tuple(views),
                host_id=room.host_id,
                status=room.status,
                max_players=self.ruleset.max_players,
            )

    def get_game(self, code: str) -> Optional[Game]:
        room = self._room(code)
        return room.game if room else None

    def get_player_room(self, player_id: str) -> Optional[str]:
        with self._lock:
            return self._player_to_room.get(player_id)

    def room_players(self, code: str) -> List[str]:
        room = self._room(code)
        if room is None:
            return []
        with room.lock:
            return list(room.members)
