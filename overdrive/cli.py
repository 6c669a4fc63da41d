"""
Overdrive CLI - Command-line interface for the engine.

Usage:
    overdrive serve [--host H] [--port P] [--map M]   Run the HTTP API
    overdrive replay <actions_file> [--seed N]        Replay a recorded race

A replay file is JSON:
    {
        "map": "Test",
        "laps": 1,
        "players": [{"player_id": "p1", "username": "Alice"}, ...],
        "actions": [{"player_id": "p1", "action": {"type": "plan", ...}}, ...]
    }
"""

import argparse
import json
import logging
import sys

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Overdrive - Racing Card Game Engine",
        prog="overdrive",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")
    serve_parser.add_argument("--map", dest="game_map", help="Default map for new races")

    # Replay command
    replay_parser = subparsers.add_parser("replay", help="Replay a recorded race")
    replay_parser.add_argument("actions_file", help="Path to replay JSON file")
    replay_parser.add_argument(
        "--seed", type=int,
        help="Shuffle seed (identity shuffle when omitted)",
    )
    replay_parser.add_argument("--json", action="store_true", help="Print the final state as JSON")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "replay":
        cmd_replay(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    from .api.app import create_app
    from .api.service import APIService
    from .engine_core.track import GameMap

    try:
        default_map = GameMap(args.game_map) if args.game_map else GameMap.USA
    except ValueError:
        print(f"Error: Unknown map: {args.game_map}")
        sys.exit(1)

    app = create_app(APIService(default_map=default_map))
    uvicorn.run(app, host=args.host, port=args.port)


def cmd_replay(args):
    """Replay a recorded race and print where everyone ended up."""
    from .engine_core import (
        EngineError,
        GameMap,
        PlayerInput,
        create_game,
        identity_shuffle,
        parse_action,
    )

    try:
        with open(args.actions_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        print(f"Error: File not found: {args.actions_file}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}")
        sys.exit(1)

    try:
        game_map = GameMap(data.get("map", GameMap.USA.value))
        laps = int(data.get("laps", 1))
        players = [
            PlayerInput(p["player_id"], p.get("username", ""))
            for p in data["players"]
        ]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        print(f"Error: Invalid replay header: {e}")
        sys.exit(1)

    shuffle = identity_shuffle if args.seed is None else None
    try:
        game = create_game(
            players,
            game_map,
            laps=laps,
            shuffle=shuffle,
            seed=args.seed,
        )
    except (EngineError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    for step, entry in enumerate(data.get("actions", []), start=1):
        try:
            action = parse_action(entry["action"])
            game.dispatch(entry["player_id"], action)
        except (KeyError, TypeError, ValueError) as e:
            print(f"Error: Malformed action #{step}: {e}")
            sys.exit(1)
        except EngineError as e:
            print(f"Error: Action #{step} rejected [{e.error_code}]: {e}")
            sys.exit(1)

    state = game.get_state()

    if args.json:
        print(json.dumps(state.to_dict(), indent=2))
        return

    print(f"Map: {state.game_map.value}  Turn: {state.turn}  Phase: {state.phase.value}")
    print(f"Next: {state.current_state.value} ({state.current_player_id or 'everyone'})")
    print("\nPlayers:")
    for player_id in state.player_order:
        view = state.get_player(player_id)
        lane = "raceline" if view.on_raceline else "outside"
        print(
            f"  {player_id:<10} pos {view.position:>4}  gear {view.gear}  "
            f"lap {view.lap}  {lane}{'  FINISHED' if view.finished else ''}"
        )

    if state.finish_order:
        print("\nFinish order:")
        for place, player_id in enumerate(state.finish_order, start=1):
            print(f"  {place}. {player_id}")


if __name__ == "__main__":
    main()
