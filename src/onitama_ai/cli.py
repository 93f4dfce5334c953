"""CLI entry point for onitama-ai — Human vs minimax AI.

コマンドラインで動く Onitama 対局プログラム。
プレイヤー（赤）対 AI（青）で対局できる。
トレーニングモードでは、各手のアドバイザー評価（0〜100）も表示する。

起動方法: `onitama-cli` （`--training` でアドバイザーの評価を表示）
"""

from __future__ import annotations

import argparse
import logging

from onitama_ai.engine.minimax import MoveRanking, display_score, evaluate, minimax_action
from onitama_ai.engine.random_player import random_action
from onitama_ai.game.actions import Action, Discard, Move
from onitama_ai.game.display import board_to_str
from onitama_ai.game.errors import ActionError
from onitama_ai.game.game import GameState, new_game
from onitama_ai.game.setup import GameSettings, load_settings
from onitama_ai.game.types import Player


def _format_action(action: Action) -> str:
    """Format an action for display.

    例: 盤上の手 → "Tiger: c5 -> c3"
        捨て札   → "discard Tiger"
    """
    if isinstance(action, Discard):
        return f"discard {action.card}"
    src = f"{chr(ord('a') + action.src.x)}{action.src.y + 1}"
    dst = f"{chr(ord('a') + action.dst.x)}{action.dst.y + 1}"
    return f"{action.card}: {src} -> {dst}"


def _ask_action(game: GameState, ranking: MoveRanking | None = None) -> Action | None:
    """Prompt until the human picks one of the legal actions (None = undo).

    ranking があれば各手の評価値をヒントとして表示する（トレーニングモード）。
    """
    state = game.snapshot()
    actions = state.legal_actions()
    ranks = ranking.ranks_by_move if ranking is not None else {}

    print("Legal actions:")
    for i, action in enumerate(actions):
        hint = ""
        if isinstance(action, Move) and action.key in ranks:
            hint = f"   [{ranks[action.key][action.dst]:+.0f}]"
        print(f"  {i}: {_format_action(action)}{hint}")
    print()

    while True:
        try:
            choice = input("Your action (number, u = undo): ").strip()
            if choice == "u":
                # 直前の自分の手番の開始まで戻す（AI の手・追加移動もまとめて戻る）
                game.undo()
                while game.can_undo and (
                    game.turn != Player.RED or game.wind_move_pending or game.ninja_move_pending
                ):
                    game.undo()
                return None
            idx = int(choice)
            if 0 <= idx < len(actions):
                action = actions[idx]
                if isinstance(action, Move) and state.board.piece_at(action.src).is_hidden_ninja:
                    reveal = input("Reveal your Ninja? [y/N]: ").strip().lower() == "y"
                    action = Move(action.card, action.src, action.dst, reveal_ninja=reveal)
                return action
            print(f"Invalid: choose 0-{len(actions) - 1}")
        except ValueError:
            print("Enter a number.")


def main(argv: list[str] | None = None) -> None:
    """Run a Human (RED) vs AI (BLUE) game.

    ゲームの流れ:
    1. 盤面を表示
    2. 合法なアクション一覧を表示して番号入力を求める
    3. AI が応答する
    4. 終局まで繰り返す
    """
    parser = argparse.ArgumentParser(description="Play Onitama against the AI")
    parser.add_argument("--ai", choices=["minimax", "random"], default="minimax")
    parser.add_argument("--depth", type=int, default=3)
    parser.add_argument("--training", action="store_true", help="show advisor scores")
    parser.add_argument("--ninja", action="store_true", help="enable the hidden Ninja variant")
    parser.add_argument("--settings", help="JSON settings file")
    parser.add_argument("--seed", type=int)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    base = load_settings(args.settings) if args.settings else GameSettings()
    settings = GameSettings(
        disabled_card_sets=base.disabled_card_sets,
        enable_wind_variant=base.enable_wind_variant,
        enable_ninja_variant=args.ninja or base.enable_ninja_variant,
        number_of_wind_cards=base.number_of_wind_cards,
        force_wind_spirit_inclusion=base.force_wind_spirit_inclusion,
        rng_seed=args.seed,
    )

    print("=== Onitama ===")
    print("You are RED (uppercase). AI is BLUE (lowercase).")
    print()

    game = new_game(settings)

    while game.winner is None:
        state = game.snapshot()
        print(board_to_str(state, viewer=Player.RED))
        ranking = None
        if args.training and state.turn == Player.RED:
            ranking = evaluate(state, args.depth)
            print(f"Advisor score: {display_score(ranking, Player.RED):.0f}/100")
        print()

        try:
            if state.turn == Player.RED:
                action = _ask_action(game, ranking)
                if action is None:
                    continue
            else:
                if args.ai == "random":
                    action = random_action(state)
                else:
                    action = minimax_action(state, depth=args.depth)
                print(f"AI plays: {_format_action(action)}")
            game.apply(action)
        except ActionError as exc:
            print(f"Rejected: {exc}")
        except (EOFError, KeyboardInterrupt):
            print("\nGame aborted.")
            return
        print()

    print(board_to_str(game.snapshot(), viewer=Player.RED))
    print()
    print("You win!" if game.winner == Player.RED else "AI wins!")


if __name__ == "__main__":
    main()
