"""Turn order and game flow for ClassicXO."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from .ai import MinimaxAI
from .board import CROSS, NOUGHT, Board, Line, Mark

logger = logging.getLogger(__name__)

HUMAN_MODE = "HUMAN_MODE"
COMPUTER_MODE = "COMPUTER_MODE"
MODES = (HUMAN_MODE, COMPUTER_MODE)

IDLE = "idle"
IN_PROGRESS = "in_progress"
ENDED = "ended"


@dataclass
class Player:
    name: Mark
    is_computer_controlled: bool = False


@dataclass(frozen=True)
class MoveOutcome:
    """Result of a single accepted move."""

    kind: str  # "continue", "win" or "tie"
    line: Optional[Line] = None
    winner: Optional[Mark] = None

    @classmethod
    def proceed(cls) -> "MoveOutcome":
        return cls(kind="continue")

    @classmethod
    def win(cls, line: Line, winner: Mark) -> "MoveOutcome":
        return cls(kind="win", line=line, winner=winner)

    @classmethod
    def tie(cls) -> "MoveOutcome":
        return cls(kind="tie")


@dataclass
class GameSession:
    """Per-game state, replaced on every start."""

    mode: str
    current_player: Player
    in_progress: bool = True
    outcome: Optional[MoveOutcome] = None


class GameView(Protocol):
    """Presentation collaborator notified by :class:`GameController`."""

    def render_move(self, index: int, player: Player) -> None: ...

    def render_win(self, line: Line, player: Player) -> None: ...

    def render_tie(self) -> None: ...

    def render_turn_prompt(self, player: Player) -> None: ...

    def clear_board_view(self) -> None: ...


@dataclass
class GameController:
    view: GameView
    ai: MinimaxAI = field(default_factory=MinimaxAI)
    board: Board = field(default_factory=Board)
    cross: Player = field(default_factory=lambda: Player(CROSS))
    nought: Player = field(default_factory=lambda: Player(NOUGHT))
    session: Optional[GameSession] = None

    # ---- inbound collaborator calls ----

    def on_start_requested(self, mode: str, human_choice: Mark = CROSS) -> None:
        self.start_game(mode, human_choice)

    def on_cell_activated(self, index: int) -> Optional[MoveOutcome]:
        return self.apply_move(index)

    # ---- game flow ----

    @property
    def state(self) -> str:
        if self.session is None:
            return IDLE
        return IN_PROGRESS if self.session.in_progress else ENDED

    def opponent_of(self, player: Player) -> Player:
        return self.nought if player is self.cross else self.cross

    def start_game(self, mode: str, human_choice: Mark = CROSS) -> None:
        """Reset the board, assign controllers and let Cross move first."""
        if mode not in MODES:
            raise ValueError(f"Unknown game mode {mode!r}")
        if human_choice not in (CROSS, NOUGHT):
            raise ValueError(f"Unknown player choice {human_choice!r}")

        self.board.reset()
        self.view.clear_board_view()

        if mode == COMPUTER_MODE:
            self.cross.is_computer_controlled = human_choice != CROSS
            self.nought.is_computer_controlled = human_choice != NOUGHT
        else:
            self.cross.is_computer_controlled = False
            self.nought.is_computer_controlled = False

        self.session = GameSession(mode=mode, current_player=self.cross)
        logger.info("New %s game (human choice %s)", mode, human_choice)
        self.view.render_turn_prompt(self.cross)

        if self.cross.is_computer_controlled:
            self.apply_move(self._computer_move(self.cross))

    def apply_move(self, index: int) -> Optional[MoveOutcome]:
        """Play ``index`` for the current player; ``None`` if the move is rejected."""
        session = self.session
        if session is None or not session.in_progress:
            logger.debug("Ignoring cell %s, no game in progress", index)
            return None

        player = session.current_player
        if not self.board.place(index, player.name):
            logger.debug("Ignoring cell %s for %s", index, player.name)
            return None

        line = self.board.check_win(index)
        if line is not None:
            session.in_progress = False
            session.outcome = MoveOutcome.win(line, player.name)
            logger.info("%s wins with %s", player.name, line)
            self.view.render_win(line, player)
            return session.outcome

        if self.board.empty_count() == 0:
            session.in_progress = False
            session.outcome = MoveOutcome.tie()
            logger.info("Game tied")
            self.view.render_move(index, player)
            self.view.render_tie()
            return session.outcome

        self.view.render_move(index, player)
        session.current_player = self.opponent_of(player)
        self.view.render_turn_prompt(session.current_player)

        if session.current_player.is_computer_controlled:
            self.apply_move(self._computer_move(session.current_player))
        return MoveOutcome.proceed()

    def _computer_move(self, player: Player) -> int:
        opponent = self.opponent_of(player)
        return self.ai.choose(self.board, player.name, opponent.name)
