"""
Terminal chess: two humans at one keyboard, a human against the random bot, or two bots.

    python -m jchess.main --black bot
"""

import argparse
import logging

from jchess.api.models import MoveRequest
from jchess.core.config import EngineSettings
from jchess.core.exceptions import InvalidRequestError
from jchess.core.log_config import configure_logging
from jchess.core.shared_types import Color
from jchess.services.chess_service import ChessService
from jchess.services.players import HumanPlayer, MoveSource, RandomBot

log = logging.getLogger("jchess")

PLAYER_KINDS = ("human", "bot")


def build_player(kind: str, settings: EngineSettings) -> MoveSource:
    if kind == "bot":
        return RandomBot(seed=settings.bot_seed)
    return HumanPlayer()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--white", choices=PLAYER_KINDS, default="human")
    parser.add_argument("--black", choices=PLAYER_KINDS, default="human")
    parser.add_argument("--log-level", default=None, help="overrides JCHESS_LOG_LEVEL")
    return parser.parse_args(argv)


def play_interactive(service: ChessService, players: dict[Color, MoveSource]) -> None:
    """Print the board before every turn. Humans type their moves, rejected ones are shown and asked again."""
    while not service.game.is_over:
        print(service.render())
        state = service.game_state()
        source = players[state.to_move]
        if isinstance(source, HumanPlayer):
            text = source.read_line(f"{state.to_move.capitalize()} to move: ")
            try:
                response = service.submit_notation(MoveRequest(notation=text))
            except InvalidRequestError as e:
                print(e)
                continue
        else:
            response = service.play_turn(source)
        if not response.accepted:
            print(response.error)
        elif response.move is not None:
            print(f"{state.to_move.capitalize()} played {response.move}")

    final = service.game_state()
    print(service.render())
    print(f"Game over: {final.status}" + (f", {final.winner} wins" if final.winner else ""))


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = EngineSettings.from_env()
    configure_logging(args.log_level or settings.log_level)

    service = ChessService(settings)
    players = {
        Color.WHITE: build_player(args.white, settings),
        Color.BLACK: build_player(args.black, settings),
    }
    log.info("Starting game: white=%s, black=%s", args.white, args.black)
    if args.white == "bot" and args.black == "bot":
        final = service.run(players[Color.WHITE], players[Color.BLACK])
        print("\n".join(final.move_history))
        print(f"Game over: {final.status}")
        return
    play_interactive(service, players)


if __name__ == "__main__":
    main()
