"""ClassicXO package exposing the board, the minimax AI, and the web application."""

from .ai import MinimaxAI
from .board import Board, InvalidCellError
from .game import GameController, Player
from .ui import app

__all__ = ["Board", "GameController", "InvalidCellError", "MinimaxAI", "Player", "app"]
