#!/usr/bin/env python3
"""
对战脚本

Usage:
    python scripts/play.py --mode watch                  # 观看 4 名角色 AI 对战
    python scripts/play.py --mode watch --characters 1 3 8 10
    python scripts/play.py --mode play                   # 坐 0 号座位与 AI 对战
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional
import time

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

import numpy as np

from core.actions import Action
from core.cards import cards_to_str
from ai import Expression, get_character, select_expression
from env import DaifugoEnv, TableConfig
from evaluation import CharacterAgent

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Daifugo Play")

    parser.add_argument(
        "--mode",
        type=str,
        default="watch",
        choices=["watch", "play"],
        help="Mode: watch AI or play against AI",
    )
    parser.add_argument(
        "--characters",
        type=int,
        nargs=4,
        help="Character ids for the 4 seats (random if omitted)",
    )
    parser.add_argument("--delay", type=float, default=1.0, help="Delay between moves")
    parser.add_argument("--games", type=int, default=1, help="Number of games")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--debug", action="store_true", help="Show AI decision logs")

    return parser.parse_args()


def action_to_str(action: Action) -> str:
    """动作转字符串"""
    if action.is_pass:
        return "Pass"
    return cards_to_str(action.cards)


def print_expressions(env: DaifugoEnv, expressions: Dict[int, Expression], rng: np.random.Generator):
    """更新并打印各角色表情"""
    state = env.state
    parts = []
    for player in state.players:
        expressions[player.id] = select_expression(player.id, state, expressions.get(player.id), rng)
        name = get_character(player.character_id).name
        parts.append(f"{name}:{expressions[player.id].value}")
    print("  ".join(parts))


def print_result(info: dict, names: List[str]):
    """打印最终名次"""
    print("\n" + "=" * 60)
    print("游戏结束!")
    for rank, seat in enumerate(info.get("standings", [])):
        print(f"  {rank + 1}. {names[seat]} ({info['roles'][seat]})")
    print(f"总步数: {info.get('step_count', 0)}")
    print("=" * 60)


def choose_human_action(legal_actions: List[Action]) -> Optional[Action]:
    """命令行选择动作，返回 None 表示退出"""
    print("\n可选动作:")
    for i, action in enumerate(legal_actions[:30]):
        print(f"  {i}: {action_to_str(action)}")
    if len(legal_actions) > 30:
        print(f"  ... 还有 {len(legal_actions) - 30} 个动作")

    while True:
        try:
            choice = input("\n请选择动作编号 (或输入 'q' 退出): ")
            if choice.lower() == 'q':
                return None
            idx = int(choice)
            if 0 <= idx < len(legal_actions):
                return legal_actions[idx]
            print("无效选择，请重试")
        except ValueError:
            print("请输入数字")


def run_games(args, human_seat: Optional[int] = None):
    """
    进行对局

    Args:
        args: 命令行参数
        human_seat: 人类玩家座位，None 表示全部由 AI 操作
    """
    config = TableConfig(character_ids=tuple(args.characters) if args.characters else None)
    env = DaifugoEnv(config=config, render_mode="human", seed=args.seed)
    rng = np.random.default_rng(args.seed)

    for game_idx in range(args.games):
        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print("=" * 60)

        obs, info = env.reset()
        state = env.state
        names = [get_character(p.character_id).name for p in state.players]
        agents = {
            p.id: CharacterAgent(p.character_id, seed=int(rng.integers(2 ** 31)))
            for p in state.players if p.id != human_seat
        }
        if human_seat is not None:
            print(f"你是 P{human_seat} ({names[human_seat]})")

        expressions: Dict[int, Expression] = {}
        done = False

        while not done:
            state = env.state
            if state.eight_cut_pending:
                print("\n8 切り! 场流")
                action = None
            elif state.turn == human_seat:
                action = choose_human_action(info["legal_actions"])
                if action is None:
                    print("退出游戏")
                    return
                print(f"\n你出牌: {action_to_str(action)}")
            else:
                action = agents[state.turn].act(state, info["legal_actions"])
                print(f"\n{names[state.turn]} 出牌: {action_to_str(action)}")
                time.sleep(args.delay)

            obs, reward, terminated, truncated, info = env.submit(action, state.turn, state.version)
            done = terminated or truncated

            effects = info.get("effects")
            if effects is not None:
                if effects.revolution_toggled:
                    print("革命!")
                if effects.spade_three_counter:
                    print("黑桃 3 返し!")
                if effects.suit_lock_set is not None:
                    print(f"缚り: {effects.suit_lock_set.value}")
                if effects.finish is not None:
                    tag = "反则上がり" if effects.finish.is_foul else "上がり"
                    print(f"{names[effects.finish.player_id]} {tag}")
            if "error" in info:
                print(f"提交被拒绝: {info['error']}")

            print_expressions(env, expressions, rng)

        print_result(info, names)

    env.close()


def main():
    args = parse_args()
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    print("=" * 60)
    print("大富豪")
    print("=" * 60)

    if args.mode == "watch":
        run_games(args)
    elif args.mode == "play":
        run_games(args, human_seat=0)


if __name__ == "__main__":
    main()
