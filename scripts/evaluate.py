#!/usr/bin/env python3
"""
评估脚本

Usage:
    python scripts/evaluate.py --character 3 --games 100
    python scripts/evaluate.py --round-robin --games 4
    python scripts/evaluate.py --tournament --games 200 --output results.json
"""
import argparse
import logging
import sys
from pathlib import Path
import json

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from ai import CHARACTERS
from env import make_env
from evaluation import (
    Evaluator,
    RandomAgent,
    RuleBasedAgent,
    CharacterAgent,
    Arena,
    LeaderBoard,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Daifugo Evaluation")

    # 模式
    parser.add_argument("--round-robin", action="store_true", help="All 4-character combinations")
    parser.add_argument("--tournament", action="store_true", help="Random 4-character tables")

    # 评估参数
    parser.add_argument("--character", type=int, help="Character id for single evaluation")
    parser.add_argument("--games", type=int, default=100, help="Number of games (per combination in round robin)")
    parser.add_argument(
        "--opponent",
        type=str,
        default="random",
        choices=["random", "rule"],
        help="Opponent type",
    )
    parser.add_argument("--reward", type=str, default="sparse", choices=["sparse", "shaped"])

    # 其他
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--output", type=str, help="Output file for results")
    parser.add_argument("--elo-output", type=str, help="Output file for ELO ratings")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    return parser.parse_args()


def env_factory(args):
    return lambda: make_env({"reward_type": args.reward})


def evaluate_single(args):
    """评估单个角色"""
    agent = CharacterAgent(args.character, seed=args.seed)
    logger.info(f"Evaluating character: {agent.name}")

    if args.opponent == "random":
        opponents = [RandomAgent(f"random{i}", seed=args.seed + i) for i in range(1, 4)]
    else:
        opponents = [RuleBasedAgent(f"rule{i}") for i in range(1, 4)]

    evaluator = Evaluator(env_fn=env_factory(args))
    result = evaluator.evaluate(
        agent=agent,
        n_games=args.games,
        opponents=opponents,
        seed=args.seed,
        verbose=args.verbose,
    )

    logger.info("=" * 50)
    logger.info("Evaluation Results")
    logger.info("=" * 50)
    logger.info(f"Average Rank: {result.avg_rank + 1:.2f}")
    logger.info(f"Daifugo Rate: {result.daifugo_rate:.2%}")
    logger.info(f"Daihinmin Rate: {result.daihinmin_rate:.2%}")
    logger.info(f"Foul Rate: {result.foul_rate:.2%}")
    logger.info(f"Average Reward: {result.avg_reward:.2f}")
    logger.info(f"Average Length: {result.avg_length:.1f}")
    logger.info("=" * 50)

    if args.output:
        with open(args.output, "w") as f:
            json.dump({
                "character": args.character,
                "avg_rank": result.avg_rank,
                "daifugo_rate": result.daifugo_rate,
                "daihinmin_rate": result.daihinmin_rate,
                "foul_rate": result.foul_rate,
                "avg_reward": result.avg_reward,
                "avg_length": result.avg_length,
                "games_played": result.games_played,
            }, f, indent=2)
        logger.info(f"Results saved to {args.output}")

    return result


def run_characters(args):
    """角色之间的循环赛或锦标赛"""
    agents = [CharacterAgent(c.id, seed=args.seed + c.id) for c in CHARACTERS]
    arena = Arena(env_fn=env_factory(args))

    if args.round_robin:
        logger.info(f"Running round robin with {len(agents)} characters")
        result = arena.round_robin(agents, games_per_match=args.games, seed=args.seed)
    else:
        logger.info(f"Running tournament with {len(agents)} characters")
        result = arena.tournament(agents, n_rounds=args.games, seed=args.seed)

    logger.info("=" * 50)
    logger.info(result)
    logger.info("=" * 50)

    leaderboard = LeaderBoard()
    leaderboard.update(result)
    logger.info(leaderboard)

    overall = arena.metrics.compute_metrics()
    logger.info(
        f"Revolutions/game: {overall['avg_revolutions']:.2f}, "
        f"eight-cuts/game: {overall['avg_eight_cuts']:.2f}, "
        f"fouls/game: {overall['avg_fouls']:.2f}"
    )

    if args.output:
        with open(args.output, "w") as f:
            json.dump({
                "rankings": result.get_ranking(),
                "total_games": result.total_games,
                "standings": result.standings,
                "elo": {p.name: p.rating for p in leaderboard.elo.get_ranking()},
            }, f, indent=2, ensure_ascii=False)
        logger.info(f"Results saved to {args.output}")

    if args.elo_output:
        leaderboard.elo.save(args.elo_output)

    return result


def main():
    args = parse_args()

    if args.round_robin or args.tournament:
        run_characters(args)
    elif args.character is not None:
        evaluate_single(args)
    else:
        logger.error("Please specify --character, --round-robin or --tournament")
        sys.exit(1)


if __name__ == "__main__":
    main()
