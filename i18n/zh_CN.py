"""简体中文翻译表。"""

STRINGS: dict[str, str] = {
    # ── 规则错误 ──
    "error.GAME_NOT_FOUND": "找不到对局 {game_id}",
    "error.GAME_FULL": "对局已满（{max_players} 人）",
    "error.INVALID_MOVE": "无效操作",
    "error.NOT_PLAYER_TURN": "还没轮到你",
    "error.PLAYER_NOT_IN_GAME": "玩家 {player_id} 不在本局中",
    "error.WRONG_PHASE": "{phase} 阶段不能执行此操作",
    "error.INSUFFICIENT_CARDS": "手牌不足：需要 {required} 张，可用 {available} 张",
    "error.ENVIRONMENT_NOT_READY": "该环境需要 {required} 张预备牌（当前 {prepared} 张）",
    "error.HAND_LIMIT_EXCEEDED": "手牌 {hand} 张超过上限 {limit} 张",
    "error.CANNOT_PLAY_CARD": "{card} 不能在 {environment} 打出",
    "error.ITEM_NOT_AVAILABLE": "此处没有该道具",
    "error.unknown_action": "未知操作类型：{action_type}",
    "error.malformed_payload": "字段缺失或格式错误：{field}",
    "error.already_joined": "玩家 {player_id} 已在本局中",
    "error.already_passed": "你已经在本次交锋中让过",
    "error.card_not_in_hand": "卡牌 {card_id} 不在你的手牌中",
    "error.unknown_environment": "环境 {environment_id} 不在场上",
    "error.cannot_prepare_here": "不能在 {environment} 预备卡牌",
    "error.discard_not_in_hand": "弃置的每张牌都必须是你手中不同的牌",

    # ── 阶段与牌型 ──
    "phase.setup": "准备",
    "phase.handbuilding": "构筑手牌",
    "phase.skirmish": "交锋",
    "phase.finished": "已结束",
    "card_type.Acolyte": "侍僧",
    "card_type.Beast": "野兽",
    "card_type.Colossus": "巨像",
    "card_type.Divine Gift": "神赐",
    "card_type.Electric": "雷电",
    "card_type.Fire": "火焰",
    "card_type.Water": "流水",

    # ── 服务端 ──
    "server.invalid_format": "消息格式错误",
    "server.unknown_type": "未知消息类型：{type}",
    "server.rate_limited": "消息过快，请稍后再试",
    "server.already_in_game": "你已在对局中",
    "server.not_in_game": "你不在对局中",
    "server.heartbeat_timeout": "心跳超时",
    "server.full": "服务器已满",

    # ── 终端视图 ──
    "ui.header": "对局 {game_id} · {phase} · 第 {turn} 回合",
    "ui.players": "玩家",
    "ui.environments": "环境",
    "ui.col.player": "玩家",
    "ui.col.color": "颜色",
    "ui.col.hand": "手牌",
    "ui.col.deck": "牌库",
    "ui.col.discard": "弃牌",
    "ui.col.wins": "胜场",
    "ui.col.status": "状态",
    "ui.col.environment": "环境",
    "ui.col.items": "道具",
    "ui.col.prepared": "预备",
    "ui.col.in_play": "场上",
    "ui.col.power": "力量",
    "ui.col.cards": "张数",
    "ui.status.current": "行动中",
    "ui.status.passed": "已让过",
    "ui.status.ready": "已准备",
    "ui.status.offline": "离线",
    "ui.active": "交锋中",
    "ui.scores.title": "{environment} 交锋结果",
    "ui.scores.winner": "胜者：{name}",
    "ui.scores.no_winner": "平局，本次交锋无人获胜",
    "ui.game_over": "游戏结束",
    "ui.standings": "最终排名",

    # ── 事件日志 ──
    "event.GAME_UPDATED": "第 {turn} 回合：轮到 {player}",
    "event.PLAYER_JOINED": "{player} 加入",
    "event.PLAYER_LEFT": "{player} 离开",
    "event.PHASE_CHANGED": "阶段：{phase}",
    "event.CARD_PREPARED": "{player} 在 {environment} 预备了一张牌",
    "event.SKIRMISH_INITIATED": "{player} 在 {environment} 发起交锋",
    "event.CARD_PLAYED": "{player} 打出 {card}",
    "event.ITEM_TAKEN": "{player} 拿取了 {item}",
    "event.PLAYER_PASSED": "{player} 让过",
    "event.SKIRMISH_ENDED": "交锋结束，胜者：{winner}",
    "event.GAME_ENDED": "游戏结束，胜者：{winner}",
    "event.nobody": "无",

    # ── Demo ──
    "demo.start": "机器人演示：{players} 名玩家，种子 {seed}",
    "demo.stalled": "{player} 已无合法行动，演示停止",
    "demo.turn_limit": "已执行 {count} 个行动，演示停止",
}
