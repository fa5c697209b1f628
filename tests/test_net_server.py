"""
Server tests: connection lifecycle, lobby handlers, action relay and
per-player state views.
"""

import json
import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from net.protocol import ClientMsg, ServerMsg
from net.server import ConnectedPlayer, GameServer
from skirmish.config import GameConfig
from skirmish.enums import GamePhase


def sent(ws):
    """Every message sent on a mock websocket, decoded."""
    return [json.loads(call.args[0]) for call in ws.send.call_args_list]


def sent_types(ws):
    return [m["type"] for m in sent(ws)]


def make_ws():
    ws = AsyncMock()
    ws.transport = MagicMock()
    ws.transport.get_extra_info.return_value = ("127.0.0.1", 12345)
    return ws


class TestGameServer:
    def test_init(self):
        server = GameServer(host="localhost", port=9999, config=GameConfig())
        assert server.host == "localhost"
        assert server.port == 9999
        assert len(server.connections) == 0
        assert len(server.games) == 0

    def test_defaults_from_config(self):
        server = GameServer(config=GameConfig(websocket_port=4321))
        assert server.port == 4321

    @pytest.mark.asyncio
    async def test_register_sends_welcome(self):
        server = GameServer(config=GameConfig())
        ws = make_ws()
        player = await server._register(ws)
        assert player.player_id in server.connections
        assert server.ws_to_player[ws] == player.player_id
        (welcome,) = sent(ws)
        assert welcome["type"] == "heartbeat_ack"
        assert welcome["data"]["player_id"] == player.player_id

    @pytest.mark.asyncio
    async def test_connection_limit(self):
        server = GameServer(config=GameConfig(), max_connections=1)
        await server._register(make_ws())
        ws = make_ws()
        assert await server._register(ws) is None
        ws.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_unregister(self):
        server = GameServer(config=GameConfig())
        ws = make_ws()
        player = await server._register(ws)
        await server._unregister(ws)
        assert ws not in server.ws_to_player
        assert player.player_id not in server.connections

    @pytest.mark.asyncio
    async def test_send(self):
        server = GameServer(config=GameConfig())
        ws = AsyncMock()
        player = ConnectedPlayer(player_id="p1", name="A", websocket=ws)
        await server._send(player, ServerMsg.heartbeat_ack())
        ws.send.assert_called_once()


class TestLobby:
    async def _connect(self, server):
        ws = make_ws()
        player = await server._register(ws)
        ws.reset_mock()
        return ws, player

    async def _send(self, server, ws, msg: ClientMsg):
        await server._handle_message(ws, msg.to_json())

    @pytest.mark.asyncio
    async def test_heartbeat(self):
        server = GameServer(config=GameConfig())
        ws, player = await self._connect(server)
        player.last_heartbeat = 0.0
        await self._send(server, ws, ClientMsg.heartbeat())
        assert sent_types(ws) == ["heartbeat_ack"]
        assert player.last_heartbeat > 0

    @pytest.mark.asyncio
    async def test_create_game(self):
        server = GameServer(config=GameConfig())
        ws, player = await self._connect(server)
        await self._send(server, ws, ClientMsg.game_create("Alice", quick_game=True, max_players=2))

        assert len(server.games) == 1
        engine = server.games.get(player.game_id)
        assert engine.state.target_skirmishes == 2
        assert engine.state.players[0].name == "Alice"
        types = sent_types(ws)
        assert types[:2] == ["game_created", "game_joined"]
        assert "game_event" in types
        assert types[-1] == "game_state"

    @pytest.mark.asyncio
    async def test_create_while_in_game(self):
        server = GameServer(config=GameConfig())
        ws, _ = await self._connect(server)
        await self._send(server, ws, ClientMsg.game_create("Alice"))
        ws.reset_mock()
        await self._send(server, ws, ClientMsg.game_create("Alice"))
        assert sent_types(ws) == ["error"]
        assert len(server.games) == 1

    @pytest.mark.asyncio
    async def test_join_unknown_game(self):
        server = GameServer(config=GameConfig())
        ws, _ = await self._connect(server)
        await self._send(server, ws, ClientMsg.game_join("missing", "Bob"))
        (error,) = sent(ws)
        assert error["data"]["code"] == "GAME_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_join_full_game(self):
        server = GameServer(config=GameConfig())
        ws1, host = await self._connect(server)
        await self._send(server, ws1, ClientMsg.game_create("Alice", max_players=2))
        ws2, _ = await self._connect(server)
        await self._send(server, ws2, ClientMsg.game_join(host.game_id, "Bob"))
        ws3, late = await self._connect(server)
        await self._send(server, ws3, ClientMsg.game_join(host.game_id, "Carol"))

        (error,) = sent(ws3)
        assert error["data"]["code"] == "GAME_FULL"
        assert late.game_id is None

    @pytest.mark.asyncio
    async def test_game_list(self):
        server = GameServer(config=GameConfig())
        ws, _ = await self._connect(server)
        await self._send(server, ws, ClientMsg.game_create("Alice"))
        ws.reset_mock()
        await self._send(server, ws, ClientMsg.game_list())
        (listing,) = sent(ws)
        assert listing["type"] == "game_listing"
        assert listing["data"]["games"][0]["player_count"] == 1

    @pytest.mark.asyncio
    async def test_leave_last_player_removes_game(self):
        server = GameServer(config=GameConfig())
        ws, player = await self._connect(server)
        await self._send(server, ws, ClientMsg.game_create("Alice"))
        ws.reset_mock()
        await self._send(server, ws, ClientMsg.game_leave())
        assert sent_types(ws) == ["game_left"]
        assert player.game_id is None
        assert len(server.games) == 0

    @pytest.mark.asyncio
    async def test_leave_without_game(self):
        server = GameServer(config=GameConfig())
        ws, _ = await self._connect(server)
        await self._send(server, ws, ClientMsg.game_leave())
        assert sent_types(ws) == ["error"]


class TestPlay:
    async def _two_player_game(self, server):
        ws1 = make_ws()
        alice = await server._register(ws1)
        await server._handle_message(ws1, ClientMsg.game_create("Alice").to_json())
        ws2 = make_ws()
        bob = await server._register(ws2)
        await server._handle_message(ws2, ClientMsg.game_join(alice.game_id, "Bob").to_json())
        ws1.reset_mock()
        ws2.reset_mock()
        return server.games.get(alice.game_id), (ws1, alice), (ws2, bob)

    @pytest.mark.asyncio
    async def test_ready_up_starts_game(self):
        server = GameServer(config=GameConfig())
        engine, (ws1, alice), (ws2, bob) = await self._two_player_game(server)
        await server._handle_message(ws1, ClientMsg.game_action("READY_UP").to_json())
        await server._handle_message(ws2, ClientMsg.game_action("READY_UP").to_json())
        assert engine.state.phase == GamePhase.HANDBUILDING

        events = [m for m in sent(ws1) if m["type"] == "game_event"]
        assert any(e["data"]["type"] == "PHASE_CHANGED" for e in events)
        seqs = [e["seq"] for e in events]
        assert seqs == sorted(seqs) and len(set(seqs)) == len(seqs)

    @pytest.mark.asyncio
    async def test_each_player_sees_own_hand_only(self):
        server = GameServer(config=GameConfig())
        engine, (ws1, alice), (ws2, bob) = await self._two_player_game(server)
        await server._handle_message(ws1, ClientMsg.game_action("READY_UP").to_json())
        await server._handle_message(ws2, ClientMsg.game_action("READY_UP").to_json())

        alice_view = [m for m in sent(ws1) if m["type"] == "game_state"][-1]["data"]
        me = next(p for p in alice_view["players"] if p["id"] == alice.player_id)
        other = next(p for p in alice_view["players"] if p["id"] == bob.player_id)
        assert len(me["hand"]) == 3
        assert other["hand_count"] == 3 and "hand" not in other

    @pytest.mark.asyncio
    async def test_action_uses_connection_player_id(self):
        server = GameServer(config=GameConfig())
        engine, (ws1, alice), (ws2, bob) = await self._two_player_game(server)
        msg = ClientMsg.game_action("READY_UP")
        msg.player_id = bob.player_id  # spoofed
        await server._handle_message(ws1, msg.to_json())
        assert engine.state.get_player(alice.player_id).is_ready
        assert not engine.state.get_player(bob.player_id).is_ready

    @pytest.mark.asyncio
    async def test_rejected_action_goes_to_sender_only(self):
        server = GameServer(config=GameConfig())
        engine, (ws1, alice), (ws2, bob) = await self._two_player_game(server)
        await server._handle_message(ws1, ClientMsg.game_action("PASS").to_json())
        (error,) = sent(ws1)
        assert error["data"]["code"] == "WRONG_PHASE"
        ws2.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_action_payload(self):
        server = GameServer(config=GameConfig())
        engine, (ws1, alice), _ = await self._two_player_game(server)
        await server._handle_message(ws1, json.dumps({"type": "game_action", "data": {"type": "TELEPORT"}}))
        (error,) = sent(ws1)
        assert error["type"] == "error"
        assert error["data"]["code"] == "BAD_REQUEST"

    @pytest.mark.asyncio
    async def test_action_outside_game(self):
        server = GameServer(config=GameConfig())
        ws = make_ws()
        await server._register(ws)
        ws.reset_mock()
        await server._handle_message(ws, ClientMsg.game_action("READY_UP").to_json())
        assert sent_types(ws) == ["error"]

    @pytest.mark.asyncio
    async def test_disconnect_mid_game_keeps_seat(self):
        server = GameServer(config=GameConfig())
        engine, (ws1, alice), (ws2, bob) = await self._two_player_game(server)
        await server._handle_message(ws1, ClientMsg.game_action("READY_UP").to_json())
        await server._handle_message(ws2, ClientMsg.game_action("READY_UP").to_json())
        await server._unregister(ws2)

        player = engine.state.get_player(bob.player_id)
        assert player is not None
        assert not player.is_connected
        assert len(server.games) == 1

    @pytest.mark.asyncio
    async def test_disconnect_in_setup_leaves_game(self):
        server = GameServer(config=GameConfig())
        engine, (ws1, alice), (ws2, bob) = await self._two_player_game(server)
        await server._unregister(ws2)
        assert engine.state.get_player(bob.player_id) is None
        leave_events = [m for m in sent(ws1) if m["type"] == "game_event"
                        and m["data"]["type"] == "PLAYER_LEFT"]
        assert len(leave_events) == 1


class TestMessageRouting:
    @pytest.mark.asyncio
    async def test_invalid_json(self):
        server = GameServer(config=GameConfig())
        ws = make_ws()
        await server._register(ws)
        ws.reset_mock()
        await server._handle_message(ws, "{broken")
        (error,) = sent(ws)
        assert error["data"]["code"] == "BAD_REQUEST"

    @pytest.mark.asyncio
    async def test_unknown_type(self):
        server = GameServer(config=GameConfig())
        ws = make_ws()
        await server._register(ws)
        ws.reset_mock()
        await server._handle_message(ws, json.dumps({"type": "dance"}))
        assert sent_types(ws) == ["error"]

    @pytest.mark.asyncio
    async def test_unknown_socket_ignored(self):
        server = GameServer(config=GameConfig())
        ws = make_ws()
        await server._handle_message(ws, ClientMsg.heartbeat().to_json())
        ws.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        server = GameServer(config=GameConfig(), rate_limit_max_msgs=2)
        ws = make_ws()
        await server._register(ws)
        ws.reset_mock()
        for _ in range(3):
            await server._handle_message(ws, ClientMsg.game_list().to_json())
        last = sent(ws)[-1]
        assert last["data"]["code"] == "RATE_LIMITED"

    @pytest.mark.asyncio
    async def test_heartbeat_not_rate_limited(self):
        server = GameServer(config=GameConfig(), rate_limit_max_msgs=1)
        ws = make_ws()
        await server._register(ws)
        ws.reset_mock()
        for _ in range(3):
            await server._handle_message(ws, ClientMsg.heartbeat().to_json())
        assert sent_types(ws) == ["heartbeat_ack"] * 3

    def test_rate_window_slides(self):
        server = GameServer(config=GameConfig(), rate_limit_max_msgs=1, rate_limit_window=1.0)
        player = ConnectedPlayer(player_id="p1", name="A", websocket=None)
        player._msg_timestamps.append(time.time() - 5)
        assert server._check_rate_limit(player)
        assert not server._check_rate_limit(player)
