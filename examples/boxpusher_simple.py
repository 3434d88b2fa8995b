"""
Box Pusher Environment Simple Example

This script demonstrates basic usage of the Box Pusher environment.
It shows how to connect to the server, reset it, and take actions.

Usage:
    # In one shell, start the server from the repository root:
    uvicorn envs.boxpusher_env.server.app:app --port 8000

    # In another:
    python examples/boxpusher_simple.py
"""

import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from envs.boxpusher_env import BoxPusherAction, BoxPusherEnv


def print_board(observation):
    """Print a visual representation of the Box Pusher board."""
    # Symbol mapping for visualization
    symbols = {
        'G': '·',  # Ground
        'A': ' ',  # Air
        'B': '□',  # Box
        'T': '.',  # Target
        'P': '@',  # Player
        'D': '▣',  # Box on target
        'O': '+',  # Player on target
    }

    width = observation.board_shape[1]
    print("\nCurrent Board:")
    print("─" * (width * 2))
    for row in observation.board:
        print(' '.join(symbols[cell] for cell in row))
    print("─" * (width * 2))


def main():
    print("Box Pusher Environment Example")
    print("=" * 50)

    client = BoxPusherEnv(base_url="http://localhost:8000")

    try:
        # Start the bundled tutorial level from scratch
        print("\nResetting environment...")
        observation = client.reset(level_name="first-steps", resume=False)

        print(f"\nInitial State:")
        print(f"  Level: {observation.level_name}")
        print(f"  Board size: {observation.board_shape}")
        print(f"  Number of boxes: {observation.num_boxes}")
        print(f"  Player position: {observation.player_position}")

        print_board(observation)

        example_moves = ["up", "right", "down", "right", "right"]

        for i, direction in enumerate(example_moves, 1):
            print(f"\n--- Move {i}: {direction.upper()} ---")
            observation = client.step(BoxPusherAction(direction=direction))

            print(f"Moved: {observation.last_move.moved}")
            print(f"Boxes on goals: {observation.boxes_on_goals}/{observation.num_boxes}")
            print(f"Total moves: {observation.moves_count}")
            print(f"Total pushes: {observation.pushes_count}")

            print_board(observation)

            if observation.is_solved:
                print("\n" + "=" * 50)
                print("CONGRATULATIONS! Puzzle solved!")
                print(f"Completed in {observation.moves_count} moves for {observation.points} points")
                print("=" * 50)
                break

        print("\nLeaderboard:")
        for rank, record in enumerate(client.leaderboard(observation.level_name), 1):
            print(f"  {rank}. {record['points']} points in {record['moves']} moves ({record['date']})")

    except Exception as e:
        print(f"\nError: {e}")
        import traceback
        traceback.print_exc()

    finally:
        print("\nCleaning up...")
        client.close()
        print("✅ Done!")


if __name__ == "__main__":
    main()
