"""
Skirmish command line entry point.

Usage:
    python main.py serve [--host HOST] [--port PORT] [-v]
    python main.py demo [--players N] [--seed SEED] [--quick] [--greedy] [--locale zh_CN]
"""

from __future__ import annotations

import argparse
import logging
import random
import sys

from rich.console import Console

from ai.bot import GreedyBot, RandomBot, run_bot_game
from ai.decision_log import DecisionLogger
from i18n import set_locale, t
from logging_config import setup_logging
from net.server import run_server
from skirmish.config import get_config
from skirmish.engine import GameEngine
from ui.rich_view import RichView

logger = logging.getLogger(__name__)

BOT_NAMES = ("Ash", "Birch", "Cedar", "Dune")
DEMO_MAX_ACTIONS = 2000


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Skirmish rules engine")
    parser.add_argument("-v", "--verbose", action="store_true", help="log to the console too")
    parser.add_argument("--locale", default=None, help="en_US or zh_CN")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the WebSocket server")
    serve.add_argument("--host", default=None, help="listen address")
    serve.add_argument("--port", type=int, default=None, help="listen port")

    demo = sub.add_parser("demo", help="watch bots play one game")
    demo.add_argument("--players", type=int, default=2, choices=range(2, 5))
    demo.add_argument("--seed", type=int, default=None)
    demo.add_argument("--quick", action="store_true", help="two skirmish wins end the game")
    demo.add_argument("--greedy", action="store_true", help="seat greedy bots instead of random ones")
    demo.add_argument("--decisions", default=None, help="write bot decisions to this JSON file")
    demo.add_argument("--max-actions", type=int, default=DEMO_MAX_ACTIONS)
    return parser


def run_demo(players: int, seed: int | None, quick: bool = False, greedy: bool = False,
             max_actions: int = DEMO_MAX_ACTIONS, decisions_path: str | None = None,
             console: Console | None = None) -> GameEngine:
    """Seat bots in a fresh game and print it as it plays out."""
    seed = seed if seed is not None else random.randrange(2**32)
    view = RichView(console)
    view.console.rule(t("demo.start", players=players, seed=seed))

    rng = random.Random(seed)
    engine = GameEngine(quick_game=quick, max_players=players, rng=random.Random(rng.getrandbits(64)))
    decisions = DecisionLogger(enabled=decisions_path is not None)
    bot_cls = GreedyBot if greedy else RandomBot
    bots = {}
    for name in BOT_NAMES[:players]:
        player_id = engine.factory.new_id()
        engine.add_player(player_id, name)
        bots[player_id] = bot_cls(random.Random(rng.getrandbits(64)), decisions)

    def on_step(engine: GameEngine, action) -> None:
        view.show_events(engine.drain_events(), engine.state)

    view.show_events(engine.drain_events(), engine.state)
    run = run_bot_game(engine, bots, max_actions=max_actions, on_step=on_step)
    view.show_state(engine.snapshot())

    if run.stalled_player_id is not None:
        name = engine.state.get_player(run.stalled_player_id).name
        view.console.print(f"[yellow]{t('demo.stalled', player=name)}[/yellow]")
    elif not run.finished:
        view.console.print(f"[yellow]{t('demo.turn_limit', count=run.actions)}[/yellow]")

    if decisions_path is not None:
        decisions.export_json(decisions_path)
    logger.info("Demo finished after %d actions (seed %d, finished=%s)", run.actions, seed, run.finished)
    return engine


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logging(level=config.log_level, enable_console=args.verbose,
                  console_level="DEBUG" if config.debug_mode else "INFO")
    set_locale(args.locale or config.locale)

    try:
        if args.command == "serve":
            run_server(host=args.host, port=args.port, config=config)
        else:
            run_demo(args.players, args.seed, quick=args.quick, greedy=args.greedy,
                     max_actions=args.max_actions, decisions_path=args.decisions)
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt - exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
