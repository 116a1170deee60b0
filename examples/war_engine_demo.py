#!/usr/bin/env python3
"""
Example demonstrating a War session against the simulated server.

This script wires a GameOrchestrator to the CLI adapter, plays a few rounds
with network faults switched on, pauses and resumes, then abandons the game.
"""

import argparse
import asyncio
import logging

from cardwar.adapters import CLIAdapter
from cardwar.config import WarConfig
from cardwar.engine import GameOrchestrator, GamePhase
from cardwar.events import WarEventType


async def main():
    parser = argparse.ArgumentParser(description="Play a few rounds of War.")
    parser.add_argument(
        "-r",
        "--rounds",
        type=int,
        default=10,
        help="number of rounds to play (default: 10)",
    )
    parser.add_argument("--seed", type=int, default=None, help="seed for the shuffle")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(name)s - %(levelname)s - %(message)s")

    # Short delays, frequent failures so the retries show up in the log
    config = WarConfig.from_dict(
        {
            "minNetworkDelay": 0.05,
            "maxNetworkDelay": 0.2,
            "errorChance": 0.2,
            "timeoutChance": 0.05,
            "timeoutDuration": 0.5,
            "retryBaseDelay": 0.1,
        }
    )
    orchestrator = GameOrchestrator.create(config, seed=args.seed)
    CLIAdapter(show_phases=True).attach(orchestrator.emitter)

    def on_round_started(data):
        print(f"\n=== Round {data['round_number']} ===")

    orchestrator.on(WarEventType.ROUND_STARTED, on_round_started)

    if not await orchestrator.start_game():
        print("Could not reach the server.")
        return

    async def play(rounds):
        await orchestrator.play_until_over(max_rounds=rounds)
        if orchestrator.phase is GamePhase.IDLE:
            print("\nA round request failed, the game was dropped.")
            return False
        return True

    half = args.rounds // 2
    try:
        if not await play(half):
            return

        if orchestrator.pause():
            print("\nTaking a break...")
            await asyncio.sleep(0.5)
            orchestrator.resume()

        if not await play(args.rounds - half):
            return

        state = orchestrator.game_state
        print(
            f"\nAfter {state.rounds_played} rounds: player {state.player_card_count}, "
            f"opponent {state.opponent_card_count}, wars {state.total_wars}"
        )

        await orchestrator.end_game()
    finally:
        await orchestrator.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
