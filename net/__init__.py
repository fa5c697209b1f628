"""Network play.

WebSocket server transport around ``skirmish.GameEngine``.
"""

from .protocol import ClientMsg, MsgType, ServerMsg, redact_state
from .registry import GameRepository
from .server import ConnectedPlayer, GameServer, run_server

__all__ = [
    "MsgType", "ServerMsg", "ClientMsg", "redact_state",
    "GameRepository",
    "GameServer", "ConnectedPlayer", "run_server",
]
