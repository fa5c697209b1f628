"""Rich rendering of game state, skirmish scores and events.

Used by the bot demo and by anyone watching a game from a terminal. Every
function takes plain state or event data and returns a rich renderable (or a
line of text), so nothing here talks to the engine.
"""

from __future__ import annotations

from typing import Any

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from i18n import card_type_name, phase_name, t
from skirmish.enums import GamePhase
from skirmish.events import EventType, GameEvent
from skirmish.power import BoardContext, PowerCalculator
from skirmish.state import GameState

# Deck colour → rich style
COLOR_STYLES = {
    "black": "bold white on grey23",
    "brown": "bold dark_orange3",
    "tan": "bold navajo_white1",
    "white": "bold bright_white",
}

_calculator = PowerCalculator()


def _player_name(state: GameState, player_id: str | None) -> str:
    if player_id is None:
        return t("event.nobody")
    player = state.get_player(player_id)
    return player.name if player else player_id[:8]


def _environment_title(state: GameState, environment_id: str | None) -> str:
    env = state.get_environment(environment_id)
    return env.title if env else (environment_id or "?")[:8]


def render_players(state: GameState) -> Table:
    table = Table(title=t("ui.players"), box=box.ROUNDED, expand=True)
    table.add_column(t("ui.col.player"), style="cyan")
    table.add_column(t("ui.col.color"))
    table.add_column(t("ui.col.hand"), justify="right")
    table.add_column(t("ui.col.deck"), justify="right")
    table.add_column(t("ui.col.discard"), justify="right")
    table.add_column(t("ui.col.wins"), justify="right", style="bold green")
    table.add_column(t("ui.col.status"))

    current = state.current_player
    for player in state.players:
        status = []
        if current is not None and current.id == player.id and state.phase in (GamePhase.HANDBUILDING, GamePhase.SKIRMISH):
            status.append(f"[bold yellow]{t('ui.status.current')}[/bold yellow]")
        if player.has_passed:
            status.append(t("ui.status.passed"))
        if state.phase == GamePhase.SETUP and player.is_ready:
            status.append(t("ui.status.ready"))
        if not player.is_connected:
            status.append(f"[red]{t('ui.status.offline')}[/red]")
        color = player.color.value
        table.add_row(
            player.name,
            Text(color, style=COLOR_STYLES.get(color, "")),
            str(len(player.hand)),
            str(len(player.deck)),
            str(len(player.discard_pile)),
            f"{player.skirmishes_won}/{state.target_skirmishes}",
            " ".join(status),
        )
    return table


def render_environments(state: GameState) -> Table:
    table = Table(title=t("ui.environments"), box=box.ROUNDED, expand=True)
    table.add_column(t("ui.col.environment"), style="magenta")
    table.add_column(t("ui.col.items"))
    table.add_column(t("ui.col.prepared"), justify="right")
    table.add_column(t("ui.col.in_play"))

    for env in state.environments:
        title = env.title
        if env.id == state.active_environment_id:
            title = f"[reverse]{title}[/reverse] ({t('ui.active')})"
        items = ", ".join(f"{i.title} [dim]({i.discard_cost})[/dim]" for i in env.items) or "-"
        in_play = []
        for player in state.players:
            cards = env.cards_of(player.id)
            if cards:
                in_play.append(f"{player.name}: " + ", ".join(str(c) for c in cards))
        table.add_row(title, items, str(state.prepared_count(env.id)), "\n".join(in_play) or "-")
    return table


def render_state(state: GameState) -> Panel:
    """Whole-board panel: header, players and environments."""
    header = t("ui.header", game_id=state.id[:8], phase=phase_name(state.phase.value), turn=state.turn)
    return Panel(Group(render_players(state), render_environments(state)),
                 title=header, box=box.DOUBLE)


def render_hand(state: GameState, player_id: str) -> Table:
    """One player's hand with the power each card would have right now."""
    player = state.get_player(player_id)
    table = Table(box=box.SIMPLE, show_header=True)
    table.add_column(t("ui.col.cards"))
    table.add_column(t("ui.col.power"), justify="right")
    if player is None:
        return table
    env = state.active_environment
    for card in player.hand:
        if env is not None:
            power = str(_calculator.effective_power(card, BoardContext.for_player(state, env, player_id)))
        else:
            power = str(card.power)
        table.add_row(f"{card.title} [dim]{card_type_name(card.type.value)}[/dim]", power)
    return table


def render_scores(data: dict[str, Any]) -> Table:
    """Score table for a SKIRMISH_ENDED event's data."""
    title = data.get("environment_title") or (data.get("environment_id") or "?")[:8]
    table = Table(title=t("ui.scores.title", environment=title), box=box.ROUNDED)
    table.add_column(t("ui.col.player"))
    table.add_column(t("ui.col.power"), justify="right")
    table.add_column(t("ui.col.cards"), justify="right")
    for score in data.get("scores", []):
        style = "bold green" if score.get("is_winner") else ""
        table.add_row(score["player_name"], str(score["power"]), str(score["cards_in_play"]), style=style)

    winner = data.get("winner")
    table.caption = (
        t("ui.scores.winner", name=winner["player_name"]) if winner else t("ui.scores.no_winner")
    )
    return table


def render_standings(data: dict[str, Any]) -> Table:
    """Final standings for a GAME_ENDED event's data."""
    table = Table(title=t("ui.standings"), box=box.DOUBLE)
    table.add_column(t("ui.col.player"))
    table.add_column(t("ui.col.wins"), justify="right")
    for row in data.get("final_scores", []):
        table.add_row(row["player_name"], str(row["skirmishes_won"]))
    return table


def describe_event(event: GameEvent, state: GameState) -> str:
    """One log line for an event, in the current locale."""
    data = event.data
    key = f"event.{event.type.value}"
    if event.type in (EventType.PLAYER_JOINED, EventType.PLAYER_LEFT):
        return t(key, player=data["player"]["name"])
    if event.type == EventType.GAME_UPDATED:
        return t(key, turn=data.get("turn"), player=_player_name(state, data.get("current_player_id")))
    if event.type == EventType.PHASE_CHANGED:
        return t(key, phase=phase_name(data["phase"]))
    if event.type == EventType.CARD_PREPARED:
        return t(key, player=_player_name(state, data["player_id"]),
                 environment=_environment_title(state, data["environment_id"]))
    if event.type == EventType.SKIRMISH_INITIATED:
        return t(key, player=_player_name(state, data["initiator_id"]),
                 environment=data["environment_title"])
    if event.type == EventType.CARD_PLAYED:
        return t(key, player=_player_name(state, data["player_id"]), card=data["card"]["title"])
    if event.type == EventType.ITEM_TAKEN:
        return t(key, player=_player_name(state, data["player_id"]), item=data["item"]["title"])
    if event.type == EventType.PLAYER_PASSED:
        return t(key, player=_player_name(state, data["player_id"]))
    if event.type == EventType.SKIRMISH_ENDED:
        winner = data.get("winner")
        return t(key, winner=winner["player_name"] if winner else t("event.nobody"))
    if event.type == EventType.GAME_ENDED:
        winner = data.get("winner")
        return t(key, winner=winner["name"] if winner else t("event.nobody"))
    return event.type.value


class RichView:
    """Prints events and boards to a rich console."""

    def __init__(self, console: Console | None = None, verbose: bool = False):
        self.console = console or Console(highlight=False)
        self.verbose = verbose

    def show_events(self, events: list[GameEvent], state: GameState) -> None:
        for event in events:
            if event.type == EventType.GAME_UPDATED and not self.verbose:
                continue
            self.console.print(f"[dim]{event.type.value:>18}[/dim]  {describe_event(event, state)}")
            if event.type == EventType.SKIRMISH_ENDED:
                self.console.print(render_scores(event.data))
            elif event.type == EventType.GAME_ENDED:
                self.console.print(Panel(render_standings(event.data), title=t("ui.game_over")))

    def show_state(self, state: GameState) -> None:
        self.console.print(render_state(state))
