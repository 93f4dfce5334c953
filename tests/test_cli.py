"""Tests for the terminal front end."""

from __future__ import annotations

import pytest

from onitama_ai import cli
from onitama_ai.engine.minimax import MoveRanking


class TestTrainingMode:
    def test_one_evaluation_per_human_turn(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        evaluations: list[int] = []
        prompts: list[str] = []
        real_evaluate = cli.evaluate

        def counting_evaluate(*args: object, **kwargs: object) -> MoveRanking:
            evaluations.append(1)
            return real_evaluate(*args, **kwargs)  # type: ignore[arg-type]

        def fake_input(prompt: str = "") -> str:
            # 自分の手番で2回指したら終了する
            prompts.append(prompt)
            if len(prompts) > 2:
                raise EOFError
            return "0"

        monkeypatch.setattr(cli, "evaluate", counting_evaluate)
        monkeypatch.setattr("builtins.input", fake_input)

        cli.main(["--training", "--ai", "random", "--seed", "0", "--depth", "1"])

        out = capsys.readouterr().out
        assert "Advisor score" in out
        assert "Game aborted." in out
        assert len(evaluations) == len(prompts)

    def test_no_evaluation_without_training(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fail(*args: object, **kwargs: object) -> MoveRanking:
            raise AssertionError("evaluate called outside training mode")

        def fake_input(prompt: str = "") -> str:
            raise EOFError

        monkeypatch.setattr(cli, "evaluate", fail)
        monkeypatch.setattr("builtins.input", fake_input)
        cli.main(["--ai", "random", "--seed", "0"])
