"""English translation table."""

STRINGS: dict[str, str] = {
    # ── Rule errors ──
    "error.GAME_NOT_FOUND": "Game {game_id} not found",
    "error.GAME_FULL": "Game is already full ({max_players} players)",
    "error.INVALID_MOVE": "Invalid move",
    "error.NOT_PLAYER_TURN": "It is not your turn",
    "error.PLAYER_NOT_IN_GAME": "Player {player_id} is not in this game",
    "error.WRONG_PHASE": "This action is not allowed during {phase}",
    "error.INSUFFICIENT_CARDS": "Not enough cards: {required} required, {available} available",
    "error.ENVIRONMENT_NOT_READY": "The environment needs {required} prepared cards ({prepared} so far)",
    "error.HAND_LIMIT_EXCEEDED": "A hand of {hand} cards is over the limit of {limit}",
    "error.CANNOT_PLAY_CARD": "{card} cannot be played at {environment}",
    "error.ITEM_NOT_AVAILABLE": "That item is not available here",
    "error.unknown_action": "Unknown action type: {action_type}",
    "error.malformed_payload": "Missing or malformed field: {field}",
    "error.already_joined": "Player {player_id} is already in the game",
    "error.already_passed": "You have already passed this skirmish",
    "error.card_not_in_hand": "Card {card_id} is not in your hand",
    "error.unknown_environment": "Environment {environment_id} is not on the board",
    "error.cannot_prepare_here": "Cards cannot be prepared at {environment}",
    "error.discard_not_in_hand": "Every discarded card must be a different card from your hand",

    # ── Phases and card types ──
    "phase.setup": "Setup",
    "phase.handbuilding": "Handbuilding",
    "phase.skirmish": "Skirmish",
    "phase.finished": "Finished",
    "card_type.Acolyte": "Acolyte",
    "card_type.Beast": "Beast",
    "card_type.Colossus": "Colossus",
    "card_type.Divine Gift": "Divine Gift",
    "card_type.Electric": "Electric",
    "card_type.Fire": "Fire",
    "card_type.Water": "Water",

    # ── Server ──
    "server.invalid_format": "Invalid message format",
    "server.unknown_type": "Unknown message type: {type}",
    "server.rate_limited": "Too many messages, slow down",
    "server.already_in_game": "You are already in a game",
    "server.not_in_game": "You are not in a game",
    "server.heartbeat_timeout": "Heartbeat timeout",
    "server.full": "Server is full",

    # ── Terminal view ──
    "ui.header": "Game {game_id} · {phase} · turn {turn}",
    "ui.players": "Players",
    "ui.environments": "Environments",
    "ui.col.player": "Player",
    "ui.col.color": "Colour",
    "ui.col.hand": "Hand",
    "ui.col.deck": "Deck",
    "ui.col.discard": "Discard",
    "ui.col.wins": "Wins",
    "ui.col.status": "Status",
    "ui.col.environment": "Environment",
    "ui.col.items": "Items",
    "ui.col.prepared": "Prepared",
    "ui.col.in_play": "In play",
    "ui.col.power": "Power",
    "ui.col.cards": "Cards",
    "ui.status.current": "to act",
    "ui.status.passed": "passed",
    "ui.status.ready": "ready",
    "ui.status.offline": "offline",
    "ui.active": "active",
    "ui.scores.title": "Skirmish at {environment}",
    "ui.scores.winner": "Winner: {name}",
    "ui.scores.no_winner": "Tie, nobody wins this skirmish",
    "ui.game_over": "Game over",
    "ui.standings": "Final standings",

    # ── Event log ──
    "event.GAME_UPDATED": "Turn {turn}: {player} to act",
    "event.PLAYER_JOINED": "{player} joined",
    "event.PLAYER_LEFT": "{player} left",
    "event.PHASE_CHANGED": "Phase: {phase}",
    "event.CARD_PREPARED": "{player} prepared a card at {environment}",
    "event.SKIRMISH_INITIATED": "{player} started a skirmish at {environment}",
    "event.CARD_PLAYED": "{player} played {card}",
    "event.ITEM_TAKEN": "{player} took {item}",
    "event.PLAYER_PASSED": "{player} passed",
    "event.SKIRMISH_ENDED": "Skirmish ended, winner: {winner}",
    "event.GAME_ENDED": "Game ended, winner: {winner}",
    "event.nobody": "nobody",

    # ── Demo ──
    "demo.start": "Bot demo: {players} players, seed {seed}",
    "demo.stalled": "No legal action left for {player}; stopping",
    "demo.turn_limit": "Stopped after {count} actions",
}
