"""FastAPI-powered web UI for playing ClassicXO in the browser."""

from __future__ import annotations

import logging
import os
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

from .ai import MinimaxAI
from .board import BOARD_SIZE, CROSS, Line
from .game import COMPUTER_MODE, GameController, Player

logger = logging.getLogger(__name__)

SESSION_TTL_SECONDS = int(os.environ.get("CLASSICXO_SESSION_TTL", str(60 * 30)))


@dataclass
class WebView:
    """Browser-side view model fed by the controller's render notifications."""

    cells: List[str] = field(default_factory=lambda: [""] * BOARD_SIZE)
    winning_line: Optional[Line] = None
    tie: bool = False
    status: str = ""
    events: List[Dict[str, object]] = field(default_factory=list)

    def render_move(self, index: int, player: Player) -> None:
        self.cells[index] = player.name
        self.events.append({"type": "move", "index": index, "player": player.name})

    def render_win(self, line: Line, player: Player) -> None:
        for index in line:
            self.cells[index] = player.name
        self.winning_line = line
        self.status = f"{player.name} has won, congratulations!"
        self.events.append({"type": "win", "line": list(line), "player": player.name})

    def render_tie(self) -> None:
        self.tie = True
        self.status = "Tie!"
        self.events.append({"type": "tie"})

    def render_turn_prompt(self, player: Player) -> None:
        self.status = f"{player.name}, now is your turn."
        self.events.append({"type": "turn", "player": player.name})

    def clear_board_view(self) -> None:
        self.cells = [""] * BOARD_SIZE
        self.winning_line = None
        self.tie = False
        self.status = ""
        self.events = []


@dataclass
class WebSession:
    """Container for one browser's controller and its view."""

    controller: GameController
    view: WebView
    last_active: float = field(default_factory=time.time)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, WebSession] = {}
SESSIONS_LOCK = threading.Lock()
app = FastAPI(title="ClassicXO", description="Tic-tac-toe played in the browser")


class StartRequest(BaseModel):
    """Request payload for starting (or restarting) a game."""

    model_config = ConfigDict(populate_by_name=True)

    mode: Literal["HUMAN_MODE", "COMPUTER_MODE"] = Field(
        default=COMPUTER_MODE,
        description="HUMAN_MODE for two humans, COMPUTER_MODE to play the AI",
    )
    human_choice: Literal["Cross", "Nought"] = Field(
        default=CROSS,
        alias="humanChoice",
        description="Mark played by the human in COMPUTER_MODE",
    )


class MoveRequest(BaseModel):
    """Request payload for activating a cell."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=BOARD_SIZE - 1)


def _cleanup_sessions() -> None:
    """Drop sessions nobody has touched for a while."""

    now = time.time()
    with SESSIONS_LOCK:
        expired = [
            game_id
            for game_id, session in SESSIONS.items()
            if now - session.last_active >= SESSION_TTL_SECONDS
        ]
        for game_id in expired:
            SESSIONS.pop(game_id, None)
    if expired:
        logger.debug("Dropped %d idle sessions", len(expired))


def _create_session() -> Tuple[str, WebSession]:
    """Create a new session and register it for later access."""

    _cleanup_sessions()
    view = WebView()
    session = WebSession(controller=GameController(view=view, ai=MinimaxAI()), view=view)
    session_id = uuid.uuid4().hex
    with SESSIONS_LOCK:
        SESSIONS[session_id] = session
    return session_id, session


def _get_session(game_id: str) -> WebSession:
    try:
        session = SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    session.last_active = time.time()
    return session


def _serialize_session(
    game_id: str, session: WebSession, accepted: Optional[bool] = None
) -> Dict[str, object]:
    with session.lock:
        controller = session.controller
        view = session.view
        game = controller.session
        outcome = game.outcome if game else None

        state: Dict[str, object] = {
            "id": game_id,
            "state": controller.state,
            "mode": game.mode if game else None,
            "currentPlayer": game.current_player.name if game else None,
            "players": [
                {"name": p.name, "computer": p.is_computer_controlled}
                for p in (controller.cross, controller.nought)
            ],
            "cells": list(view.cells),
            "emptyCount": controller.board.empty_count(),
            "winner": outcome.winner if outcome else None,
            "winningLine": list(view.winning_line) if view.winning_line else None,
            "tie": view.tie,
            "status": view.status,
            "events": list(view.events),
        }
        if accepted is not None:
            state["accepted"] = accepted
        return state


def _start(session: WebSession, request: StartRequest) -> None:
    with session.lock:
        session.controller.on_start_requested(request.mode, request.human_choice)


@app.post("/api/game")
def create_game(request: StartRequest) -> Dict[str, object]:
    game_id, session = _create_session()
    _start(session, request)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/start")
def restart_game(game_id: str, request: StartRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    _start(session, request)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(game_id: str, request: MoveRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        outcome = session.controller.on_cell_activated(request.cell_index)
    return _serialize_session(game_id, session, accepted=outcome is not None)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>ClassicXO</title>
    <link rel=\"preconnect\" href=\"https://fonts.googleapis.com\" />
    <link rel=\"preconnect\" href=\"https://fonts.gstatic.com\" crossorigin />
    <link
      href=\"https://fonts.googleapis.com/css2?family=Poppins:wght@400;500;600;700&display=swap\"
      rel=\"stylesheet\"
    />
    <style>
      :root {
        color-scheme: light;
        font-family: 'Poppins', system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
        font-weight: 400;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
        min-height: 100vh;
        display: flex;
        justify-content: center;
        padding: 2rem 1rem 3rem;
        color: #13203a;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(520px, 100%);
      }
      h1 {
        margin: 0 0 1.5rem;
        font-size: clamp(1.8rem, 2.4vw + 1.2rem, 2.6rem);
        text-align: center;
        letter-spacing: 0.06em;
        color: #0c1a33;
      }
      button,
      select {
        font-size: 1rem;
        padding: 0.55rem 0.95rem;
        border-radius: 999px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: white;
        cursor: pointer;
        font-family: inherit;
      }
      button:disabled {
        cursor: default;
        opacity: 0.6;
      }
      .controls {
        display: flex;
        flex-wrap: wrap;
        gap: 0.75rem;
        justify-content: center;
        align-items: center;
        margin-bottom: 1.25rem;
      }
      .hidden {
        display: none !important;
      }
      #status {
        text-align: center;
        font-size: 1.1rem;
        font-weight: 600;
        min-height: 1.6rem;
        margin: 0 auto 1rem;
      }
      #status .name.cross {
        color: #f8443e;
      }
      #status .name.nought {
        color: #0784ee;
      }
      #status .name.winner {
        color: #3bd04c;
      }
      .board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 0.5rem;
        width: min(360px, 80vw);
        margin: 0 auto;
      }
      .square {
        aspect-ratio: 1;
        border-radius: 14px;
        border: 1px solid rgba(60, 70, 120, 0.2);
        background: rgba(236, 243, 255, 0.9);
        font-size: clamp(2rem, 9vw, 3.5rem);
        font-weight: 700;
        display: flex;
        align-items: center;
        justify-content: center;
        padding: 0;
      }
      .square.cross {
        color: #f8443e;
      }
      .square.nought {
        color: #0784ee;
      }
      .square.win {
        background: rgba(59, 208, 76, 0.25);
        color: #1f8a2c;
      }
    </style>
  </head>
  <body>
    <main>
      <h1>ClassicXO</h1>
      <div class=\"controls\" id=\"controls\">
        <select id=\"gameMode\">
          <option value=\"COMPUTER_MODE\">Player vs Computer</option>
          <option value=\"HUMAN_MODE\">Player vs Player</option>
        </select>
        <span id=\"playerChoiceContainer\">
          <label><input type=\"radio\" name=\"playerChoice\" value=\"Cross\" checked /> Cross</label>
          <label><input type=\"radio\" name=\"playerChoice\" value=\"Nought\" /> Nought</label>
        </span>
        <button id=\"startBtn\">Start</button>
      </div>
      <div id=\"status\"><span class=\"name\"></span><span class=\"text\">Press Start to play.</span></div>
      <div class=\"board\" id=\"board\"></div>
    </main>
    <script>
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const modeEl = document.getElementById('gameMode');
      const choiceContainer = document.getElementById('playerChoiceContainer');
      const startButton = document.getElementById('startBtn');
      const symbols = { Cross: '\\u2715', Nought: '\\u25EF' };

      let gameId = null;
      let gameState = null;
      let isRequestPending = false;

      const squares = Array.from({ length: 9 }, (_, index) => {
        const square = document.createElement('button');
        square.classList.add('square');
        square.addEventListener('click', () => sendMove(index));
        boardEl.appendChild(square);
        return square;
      });

      function selectedChoice() {
        const checked = document.querySelector('input[name=\"playerChoice\"]:checked');
        return checked ? checked.value : 'Cross';
      }

      function updateLabel(message, won) {
        const nameEl = statusEl.querySelector('.name');
        const textEl = statusEl.querySelector('.text');
        nameEl.className = 'name';
        nameEl.textContent = '';
        for (const name of ['Cross', 'Nought']) {
          if (message.startsWith(name)) {
            nameEl.textContent = name;
            nameEl.classList.add(won ? 'winner' : name.toLowerCase());
            message = message.slice(name.length);
          }
        }
        textEl.textContent = message;
      }

      function renderBoard() {
        const cells = gameState ? gameState.cells : Array(9).fill('');
        const line = (gameState && gameState.winningLine) || [];
        squares.forEach((square, index) => {
          const mark = cells[index];
          square.textContent = mark ? symbols[mark] : '';
          square.className = 'square';
          if (mark) {
            square.classList.add(mark.toLowerCase());
          }
          if (line.includes(index)) {
            square.classList.add('win');
          }
        });
      }

      function setState(data) {
        gameId = data.id;
        gameState = data;
        renderBoard();
        updateLabel(data.status || '', Boolean(data.winner));
      }

      async function startGame() {
        if (isRequestPending) return;
        isRequestPending = true;
        startButton.disabled = true;
        const body = JSON.stringify({ mode: modeEl.value, humanChoice: selectedChoice() });
        const url = gameId ? `/api/game/${gameId}/start` : '/api/game';
        try {
          let response = await fetch(url, {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body,
          });
          if (response.status === 404) {
            response = await fetch('/api/game', {
              method: 'POST',
              headers: { 'Content-Type': 'application/json' },
              body,
            });
          }
          if (!response.ok) {
            throw new Error('Unable to start game');
          }
          setState(await response.json());
        } catch (error) {
          updateLabel(error.message || 'Network error. Please try again.', false);
        } finally {
          startButton.disabled = false;
          isRequestPending = false;
        }
      }

      async function sendMove(cellIndex) {
        if (!gameId || !gameState || gameState.state !== 'in_progress' || isRequestPending) {
          return;
        }
        isRequestPending = true;
        try {
          const response = await fetch(`/api/game/${gameId}/move`, {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify({ cellIndex }),
          });
          if (response.ok) {
            setState(await response.json());
          }
        } catch (error) {
          updateLabel('Network error. Please try again.', false);
        } finally {
          isRequestPending = false;
        }
      }

      modeEl.addEventListener('change', () => {
        choiceContainer.classList.toggle('hidden', modeEl.value !== 'COMPUTER_MODE');
      });
      startButton.addEventListener('click', startGame);
      renderBoard();
    </script>
  </body>
</html>
"""
