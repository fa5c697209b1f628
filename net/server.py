"""WebSocket game server.

asyncio server that hosts many games, one ``GameEngine`` each.

Features:
- lobby: create / join / leave / list games
- relays client action envelopes to the engine of the sender's game
- broadcasts drained engine events, then a per-player redacted snapshot
- marks players disconnected when their socket closes
- heartbeat timeout detection
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import websockets
from pydantic import BaseModel, ValidationError

from i18n import t as _t
from skirmish.config import GameConfig, get_config
from skirmish.engine import GameEngine
from skirmish.enums import GamePhase

from .models import GameActionData, GameCreateData, GameJoinData, validate_client_message
from .protocol import MsgType, ServerMsg, redact_state
from .registry import GameRepository

if TYPE_CHECKING:
    from websockets.asyncio.server import ServerConnection

logger = logging.getLogger(__name__)


# ==================== Data model ====================

@dataclass
class ConnectedPlayer:
    """A connected client"""
    player_id: str
    name: str
    websocket: ServerConnection
    game_id: str | None = None
    last_heartbeat: float = field(default_factory=time.time)
    # sliding-window rate limit: message timestamps
    _msg_timestamps: list[float] = field(default_factory=list)


# ==================== Server ====================

RATE_LIMIT_WINDOW: float = 1.0   # seconds
RATE_LIMIT_MAX_MSGS: int = 30    # messages per window
DEFAULT_MAX_CONNECTIONS: int = 200


class GameServer:
    """Skirmish WebSocket server

    Responsibilities:
    1. manage WebSocket connections
    2. manage game lifecycles through a GameRepository
    3. route client messages to handlers
    4. relay engine events to the players of each game
    """

    def __init__(self, host: str | None = None, port: int | None = None,
                 config: GameConfig | None = None,
                 repository: GameRepository | None = None,
                 rate_limit_window: float = RATE_LIMIT_WINDOW,
                 rate_limit_max_msgs: int = RATE_LIMIT_MAX_MSGS,
                 max_connections: int = DEFAULT_MAX_CONNECTIONS):
        self.config = config or get_config()
        self.host = host if host is not None else self.config.websocket_host
        self.port = port if port is not None else self.config.websocket_port
        self._rate_window = rate_limit_window
        self._rate_max = rate_limit_max_msgs
        self._max_connections = max_connections
        self._max_message_size = self.config.ws_max_message_size
        self._heartbeat_timeout = self.config.heartbeat_timeout
        # connections
        self.connections: dict[str, ConnectedPlayer] = {}  # player_id → player
        self.ws_to_player: dict[ServerConnection, str] = {}  # websocket → player_id
        # games
        self.games = repository or GameRepository(self.config)
        self._event_seq: dict[str, int] = {}  # game_id → last event seq
        # routing table
        self._handlers: dict[MsgType, Callable[[ConnectedPlayer, BaseModel | None], Awaitable[None]]] = {
            MsgType.HEARTBEAT: self._handle_heartbeat,
            MsgType.GAME_CREATE: self._handle_game_create,
            MsgType.GAME_JOIN: self._handle_game_join,
            MsgType.GAME_LEAVE: self._handle_game_leave,
            MsgType.GAME_LIST: self._handle_game_list,
            MsgType.GAME_ACTION: self._handle_game_action,
        }
        self._running = False
        self._heartbeat_task: asyncio.Task | None = None

    # ==================== Connections ====================

    async def _register(self, websocket: ServerConnection) -> ConnectedPlayer | None:
        """Register a new connection and send the welcome message."""
        if len(self.connections) >= self._max_connections:
            logger.warning("Connection limit reached (%d), refusing", self._max_connections)
            await websocket.close(1013, _t("server.full"))  # 1013 = Try Again Later
            return None

        pid = str(uuid.uuid4())
        player = ConnectedPlayer(player_id=pid, name=pid[:8], websocket=websocket)
        self.connections[pid] = player
        self.ws_to_player[websocket] = pid

        await self._send(player, ServerMsg.welcome(pid))
        logger.info("Player %s connected", pid)
        return player

    async def _unregister(self, websocket: ServerConnection) -> None:
        """Drop a connection; keep the seat in a running game."""
        pid = self.ws_to_player.pop(websocket, None)
        if pid is None:
            return
        player = self.connections.pop(pid, None)
        if player and player.game_id:
            engine = self.games.get(player.game_id)
            if engine is not None:
                phase = engine.state.phase
                if phase in (GamePhase.HANDBUILDING, GamePhase.SKIRMISH):
                    engine.set_player_connection(pid, False)
                    await self._flush(engine)
                else:
                    await self._leave_game(player, engine)
        logger.info("Player %s disconnected", pid)

    # ==================== Sending ====================

    async def _send(self, player: ConnectedPlayer, msg: ServerMsg) -> None:
        """Send to one player"""
        try:
            await player.websocket.send(msg.to_json())
        except websockets.ConnectionClosed as e:
            logger.warning("Send to %s failed: %s", player.player_id, e)

    def _members(self, game_id: str) -> list[ConnectedPlayer]:
        return [p for p in self.connections.values() if p.game_id == game_id]

    async def _broadcast_game(self, game_id: str, msg: ServerMsg,
                              exclude: str | None = None) -> None:
        """Send to every connected player of a game"""
        for player in self._members(game_id):
            if player.player_id != exclude:
                await self._send(player, msg)

    async def _flush(self, engine: GameEngine) -> None:
        """Relay pending engine events, then each member's view of the state."""
        game_id = engine.game_id
        for event in engine.drain_events():
            seq = self._event_seq.get(game_id, 0) + 1
            self._event_seq[game_id] = seq
            await self._broadcast_game(game_id, ServerMsg.game_event(event.to_dict(), seq=seq))

        state = engine.to_dict()
        seq = self._event_seq.get(game_id, 0)
        for player in self._members(game_id):
            view = redact_state(state, player.player_id)
            await self._send(player, ServerMsg.game_state(view, seq=seq))

    # ==================== Routing ====================

    def _check_rate_limit(self, player: ConnectedPlayer) -> bool:
        """True if the message may be processed."""
        now = time.time()
        cutoff = now - self._rate_window
        ts = player._msg_timestamps
        while ts and ts[0] < cutoff:
            ts.pop(0)
        if len(ts) >= self._rate_max:
            return False
        ts.append(now)
        return True

    async def _handle_message(self, websocket: ServerConnection, raw: str) -> None:
        """Validate a frame with pydantic and route it."""
        pid = self.ws_to_player.get(websocket)
        player = self.connections.get(pid) if pid else None
        if not player:
            return

        try:
            frame, data = validate_client_message(raw)
        except ValidationError as ve:
            logger.warning("Invalid message from %s: %s", player.player_id, ve.error_count())
            await self._send(player, ServerMsg.error(_t("server.invalid_format")))
            return

        try:
            msg_type = MsgType(frame.type)
        except ValueError:
            await self._send(player, ServerMsg.error(_t("server.unknown_type", type=frame.type)))
            return

        # heartbeats are not rate limited
        if msg_type != MsgType.HEARTBEAT and not self._check_rate_limit(player):
            logger.warning("Rate limit: dropping message from %s", player.player_id)
            await self._send(player, ServerMsg.error(_t("server.rate_limited"), code="RATE_LIMITED"))
            return

        handler = self._handlers.get(msg_type)
        if handler:
            await handler(player, data)
        else:
            await self._send(player, ServerMsg.error(_t("server.unknown_type", type=frame.type)))

    # ==================== Lobby handlers ====================

    async def _handle_heartbeat(self, player: ConnectedPlayer, data: BaseModel | None) -> None:
        player.last_heartbeat = time.time()
        await self._send(player, ServerMsg.heartbeat_ack())

    async def _handle_game_create(self, player: ConnectedPlayer, data: GameCreateData) -> None:
        if player.game_id:
            await self._send(player, ServerMsg.error(_t("server.already_in_game")))
            return

        engine = self.games.create(quick_game=data.quick_game, max_players=data.max_players)
        await self._send(player, ServerMsg.game_created(engine.game_id, {
            "quick_game": data.quick_game,
            "max_players": engine.state.max_players,
            "target_skirmishes": engine.state.target_skirmishes,
        }))
        await self._join(player, engine, data.player_name)

    async def _handle_game_join(self, player: ConnectedPlayer, data: GameJoinData) -> None:
        if player.game_id:
            await self._send(player, ServerMsg.error(_t("server.already_in_game")))
            return

        found = self.games.require(data.game_id)
        if not isinstance(found, GameEngine):
            await self._send(player, ServerMsg.game_error(found))
            return
        await self._join(player, found, data.player_name)

    async def _join(self, player: ConnectedPlayer, engine: GameEngine, name: str) -> None:
        error = engine.add_player(player.player_id, name)
        if error is not None:
            await self._send(player, ServerMsg.game_error(error))
            if not engine.state.players:
                self._discard_game(engine.game_id)
            return

        player.name = name
        player.game_id = engine.game_id
        self.games.bind_player(player.player_id, engine.game_id)
        logger.info("Player %s joined game %s", name, engine.game_id)
        await self._send(player, ServerMsg.game_joined(engine.game_id, player.player_id, name))
        await self._flush(engine)

    async def _handle_game_leave(self, player: ConnectedPlayer, data: BaseModel | None) -> None:
        if not player.game_id:
            await self._send(player, ServerMsg.error(_t("server.not_in_game")))
            return
        engine = self.games.get(player.game_id)
        game_id = player.game_id
        if engine is not None:
            await self._leave_game(player, engine)
        player.game_id = None
        await self._send(player, ServerMsg.game_left(game_id))

    async def _leave_game(self, player: ConnectedPlayer, engine: GameEngine) -> None:
        engine.remove_player(player.player_id)
        self.games.unbind_player(player.player_id)
        player.game_id = None
        if engine.state.players:
            await self._flush(engine)
        else:
            engine.drain_events()
            self._discard_game(engine.game_id)

    def _discard_game(self, game_id: str) -> None:
        self.games.remove(game_id)
        self._event_seq.pop(game_id, None)

    async def _handle_game_list(self, player: ConnectedPlayer, data: BaseModel | None) -> None:
        await self._send(player, ServerMsg.game_listing(self.games.list_games()))

    # ==================== Play ====================

    async def _handle_game_action(self, player: ConnectedPlayer, data: GameActionData) -> None:
        engine = self.games.get(player.game_id or "")
        if engine is None:
            await self._send(player, ServerMsg.error(_t("server.not_in_game")))
            return

        # the acting player is always the connection's own id
        error = engine.process_envelope(data.to_envelope(player.player_id))
        if error is not None:
            await self._send(player, ServerMsg.game_error(error))
            return
        await self._flush(engine)

    # ==================== Heartbeat ====================

    async def _heartbeat_checker(self) -> None:
        """Background task closing connections whose heartbeat timed out."""
        while self._running:
            await asyncio.sleep(self._heartbeat_timeout / 2)
            now = time.time()
            stale = [
                p for p in list(self.connections.values())
                if now - p.last_heartbeat > self._heartbeat_timeout
            ]
            for player in stale:
                logger.info("Player %s heartbeat timeout", player.player_id)
                try:
                    await player.websocket.close(1001, _t("server.heartbeat_timeout"))
                except websockets.ConnectionClosed:
                    pass
                await self._unregister(player.websocket)

    # ==================== Lifecycle ====================

    async def _connection_handler(self, websocket: ServerConnection) -> None:
        """Serve one WebSocket connection"""
        player = await self._register(websocket)
        if player is None:
            return
        try:
            async for raw_message in websocket:
                if isinstance(raw_message, bytes):
                    raw_message = raw_message.decode("utf-8", errors="replace")
                await self._handle_message(websocket, raw_message)
        except websockets.ConnectionClosed as e:
            logger.debug("Connection of %s closed: %s", player.player_id, e)
        finally:
            await self._unregister(websocket)

    async def start(self) -> None:
        """Run until ``stop`` is called."""
        self._running = True
        logger.info("Skirmish server listening on ws://%s:%s", self.host, self.port)
        self._heartbeat_task = asyncio.create_task(self._heartbeat_checker())

        async with websockets.serve(
            self._connection_handler,
            self.host,
            self.port,
            max_size=self._max_message_size,
        ):
            while self._running:
                await asyncio.sleep(1)

    def stop(self) -> None:
        self._running = False
        if self._heartbeat_task and not self._heartbeat_task.done():
            self._heartbeat_task.cancel()
        logger.info("Server stopped")


def run_server(host: str | None = None, port: int | None = None,
               config: GameConfig | None = None) -> None:
    """Blocking entry point used by ``main.py serve``."""
    server = GameServer(host=host, port=port, config=config)
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        server.stop()


__all__ = ["ConnectedPlayer", "GameServer", "run_server"]
