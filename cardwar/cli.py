"""
Command-line entry point: play War against the simulated server.

Plays one game with a round-by-round printout, or a batch of games followed
by summary statistics.
"""

import argparse
import asyncio
import logging
import random
import sys
from typing import List, Optional

from cardwar.adapters import CLIAdapter, DummyAdapter, PlatformAdapter, TranscriptAdapter
from cardwar.config import InvalidConfigError, WarConfig
from cardwar.engine import GameOrchestrator, GamePhase
from cardwar.stats import summarize_games
from cardwar.war.state import GameState

logger = logging.getLogger("cardwar.cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play a simulation of War Card Game.")
    parser.add_argument(
        "-g", "--games", type=int, default=1, help="number of games to play (default: 1)"
    )
    parser.add_argument(
        "-r",
        "--max-rounds",
        type=int,
        default=None,
        help="abandon a game after this many rounds (default: no limit)",
    )
    parser.add_argument("--seed", type=int, default=None, help="seed for the deck shuffle")
    parser.add_argument(
        "--network-seed", type=int, default=None, help="seed for latency and failures"
    )
    parser.add_argument("--min-delay", type=float, help="minimum network delay in seconds")
    parser.add_argument("--max-delay", type=float, help="maximum network delay in seconds")
    parser.add_argument("--timeout-chance", type=float, help="probability of a timeout")
    parser.add_argument("--error-chance", type=float, help="probability of a server error")
    parser.add_argument("--timeout-duration", type=float, help="length of a timeout in seconds")
    parser.add_argument("--retries", type=int, help="attempts per server call")
    parser.add_argument("--retry-delay", type=float, help="base retry delay in seconds")
    parser.add_argument(
        "--fast",
        action="store_true",
        help="no simulated latency or settle pauses (failures are still injected)",
    )
    parser.add_argument("--transcript", help="append a JSON-lines transcript to this file")
    parser.add_argument(
        "-s", "--silent", action="store_true", help="run in silent mode (no round output)"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging level (default: WARNING)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> WarConfig:
    """Apply command-line overrides on top of the default settings."""
    config = WarConfig()
    if args.fast:
        config = config.with_overrides(
            min_network_delay=0.0,
            max_network_delay=0.0,
            timeout_duration=0.0,
            retry_base_delay=0.0,
            war_settle_delay=0.0,
            round_settle_delay=0.0,
        )
    return config.with_overrides(
        min_network_delay=args.min_delay,
        max_network_delay=args.max_delay,
        timeout_chance=args.timeout_chance,
        error_chance=args.error_chance,
        timeout_duration=args.timeout_duration,
        max_retry_attempts=args.retries,
        retry_base_delay=args.retry_delay,
    )


async def play_game(
    config: WarConfig,
    adapters: List[PlatformAdapter],
    seed: Optional[int] = None,
    network_rng: Optional[random.Random] = None,
    max_rounds: Optional[int] = None,
) -> Optional[GameState]:
    """
    Play one full game.

    Returns:
        The final game snapshot, or None if the game could not be started
        or a round request failed for good
    """
    orchestrator = GameOrchestrator.create(config, seed=seed, network_rng=network_rng)
    for adapter in adapters:
        adapter.attach(orchestrator.emitter)

    try:
        if not await orchestrator.start_game():
            return None

        await orchestrator.play_until_over(max_rounds)
        if orchestrator.phase is GamePhase.IDLE:
            return None

        if orchestrator.phase in (GamePhase.PLAYING, GamePhase.PAUSED):
            await orchestrator.end_game()
        return orchestrator.game_state
    finally:
        await orchestrator.shutdown()
        for adapter in adapters:
            adapter.detach()
            await adapter.flush()


async def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = build_config(args)
    except InvalidConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    network_rng = random.Random(args.network_seed)
    batch = args.games > 1

    adapters: List[PlatformAdapter] = [
        DummyAdapter() if args.silent or batch else CLIAdapter()
    ]
    if args.transcript:
        adapters.append(TranscriptAdapter(args.transcript))

    for adapter in adapters:
        await adapter.initialize()

    finished: List[GameState] = []
    failed = 0
    for game_number in range(args.games):
        seed = args.seed + game_number if args.seed is not None else None
        state = await play_game(config, adapters, seed, network_rng, args.max_rounds)
        if state is None:
            failed += 1
            logger.warning("Game %d did not finish", game_number + 1)
            continue
        finished.append(state)

    for adapter in adapters:
        await adapter.shutdown()

    if batch and finished:
        summary = summarize_games(finished)
        interval = summary.rounds_interval
        print(f"Games played: {summary.games} ({failed} failed)")
        print(
            f"Rounds per game: mean {summary.mean_rounds:.1f}, "
            f"median {summary.median_rounds:.1f}, std {summary.std_rounds:.1f}, "
            f"range {summary.min_rounds}-{summary.max_rounds}"
        )
        print(
            f"Mean rounds {interval.confidence:.0%} CI: "
            f"[{interval.lower:.1f}, {interval.upper:.1f}]"
        )
        print(
            f"Player wins {summary.player_win_rate:.1%}, "
            f"opponent wins {summary.opponent_win_rate:.1%}, "
            f"no winner {summary.draw_rate:.1%}"
        )
        print(f"Wars per game: {summary.mean_wars:.2f}")
    elif not finished:
        print("No game could be completed.", file=sys.stderr)
        return 1

    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
