from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError

from .config import Settings
from .events import Event, Gateway
from .models import AnswerOutcome, Phase, Player, RoundStep, Session
from .questions import QuestionGenerator
from .schemas import (
    AnswerIn,
    GameResumedOut,
    HostCommandIn,
    JoinedOut,
    JoinIn,
    NewQuestionOut,
    QuestionOut,
    SessionSnapshotOut,
    ShowAnswerOut,
    inbound_adapter,
)
from .scoring import calculate_score
from .timers import Scheduler, TimerSlot
from .utils import now_ms, project_leaderboard

logger = logging.getLogger(__name__)

QUESTION_TIMER = "question"
REVEAL_TIMER = "reveal"


class GameController:
    """Authoritative state machine for one game session.

    Every method here is synchronous and must only be called from the
    session's ``SessionActor`` so that player commands, host commands and
    timer firings never interleave.
    """

    def __init__(
        self,
        gateway: Gateway,
        scheduler: Scheduler,
        settings: Settings,
        generator: Optional[QuestionGenerator] = None,
        clock: Callable[[], float] = now_ms,
    ):
        self.gateway = gateway
        self.settings = settings
        self.clock = clock
        self.generator = generator or QuestionGenerator(choice_count=settings.CHOICE_COUNT)
        self.timer = TimerSlot(scheduler, clock)
        self.session = Session(total_questions=settings.total_questions)
        self._paused_timer: Optional[str] = None
        self._host_commands = {
            "hostStartGame": self.start,
            "hostPauseGame": self.pause,
            "hostResumeGame": self.resume,
            "hostStopGame": self.stop,
            "hostResetGame": self.reset,
        }

    # ---- routing ----

    def handle(self, conn_id: str, raw: Any) -> None:
        try:
            message = inbound_adapter.validate_python(raw)
        except ValidationError as exc:
            logger.debug("ignoring malformed message from %s: %s", conn_id, exc.errors(include_url=False))
            return

        if isinstance(message, JoinIn):
            self.join(conn_id, message.name)
        elif isinstance(message, AnswerIn):
            self.answer(conn_id, message.option_id)
        elif isinstance(message, HostCommandIn):
            self._host_commands[message.type]()

    # ---- players ----

    def join(self, conn_id: str, name: str) -> None:
        s = self.session
        player = Player(id=conn_id, name=name[: self.settings.MAX_NAME_LENGTH])
        s.players[conn_id] = player
        logger.info("%s joined (%s)", player.name, conn_id)

        self.gateway.send_to_one(conn_id, Event(name="joined", data=JoinedOut(phase=s.phase)))
        self._publish_players()

    def disconnect(self, conn_id: str) -> None:
        player = self.session.players.pop(conn_id, None)
        if player is None:
            return
        logger.info("%s left (%s)", player.name, conn_id)
        self._publish_players()
        # the leaver may have been the last one we were waiting on
        self._check_all_answered()

    def answer(self, conn_id: str, option_id: str) -> None:
        s = self.session
        player = s.players.get(conn_id)
        if (
            player is None
            or player.answered
            or s.current_question is None
            or not s.accepting_answers
            or s.paused
        ):
            logger.debug("ignoring answer from %s", conn_id)
            return

        player.answered = True
        elapsed = self.clock() - (s.question_started_at or 0)
        if option_id == s.current_question.correct_id:
            points = calculate_score(
                elapsed,
                self.settings.QUESTION_TIME_LIMIT_MS,
                ceiling=self.settings.SCORE_CEILING,
                floor=self.settings.SCORE_FLOOR,
            )
            player.score += points
            player.last_answer = AnswerOutcome(correct=True, points=points)
        else:
            player.last_answer = AnswerOutcome(correct=False, points=0)

        self.gateway.send_to_one(conn_id, Event(name="answerResult", data=player.last_answer))
        self.gateway.send_to_all(Event(name="leaderboard", data=project_leaderboard(s.players.values())))
        self._check_all_answered()

    # ---- host commands ----

    def start(self) -> None:
        s = self.session
        self.timer.cancel()
        s.clear_round_state()
        s.phase = Phase.ACTIVE
        for p in s.players.values():
            p.reset_game()
        logger.info("game started with %d players", len(s.players))

        self.gateway.send_to_all(Event(name="gameStarted"))
        self.gateway.send_to_all(Event(name="leaderboard", data=project_leaderboard(s.players.values())))
        self.advance_round()

    def pause(self) -> None:
        s = self.session
        if s.phase != Phase.ACTIVE or s.paused:
            return
        s.paused = True
        s.remaining_at_pause = self.timer.remaining_ms()
        self._paused_timer = self.timer.kind
        self.timer.cancel()
        logger.info("game paused with %.0f ms left on %s timer", s.remaining_at_pause, self._paused_timer)
        self.gateway.send_to_all(Event(name="gamePaused"))

    def resume(self) -> None:
        s = self.session
        if s.phase != Phase.ACTIVE or not s.paused:
            return
        remaining = s.remaining_at_pause or 0.0
        limit = self.settings.QUESTION_TIME_LIMIT_MS

        s.paused = False
        s.remaining_at_pause = None
        if self._paused_timer == REVEAL_TIMER:
            self.timer.arm(REVEAL_TIMER, remaining, self.after_reveal)
        else:
            # keep elapsed-time accounting continuous across the pause
            s.question_started_at = self.clock() - (limit - remaining)
            self.timer.arm(QUESTION_TIMER, remaining, self.on_time_expired)
        logger.info("game resumed with %.0f ms left", remaining)
        self.gateway.send_to_all(Event(name="gameResumed", data=GameResumedOut(time_remaining=round(remaining))))
        if self.timer.kind == QUESTION_TIMER:
            # players may have left while paused, leaving only answerers
            self._check_all_answered()

    def stop(self) -> None:
        s = self.session
        self.timer.cancel()
        s.phase = Phase.LOBBY
        s.clear_round_state()
        for p in s.players.values():
            p.reset_game()
        logger.info("game reset to lobby")

        self.gateway.send_to_all(Event(name="gameReset"))
        self.gateway.send_to_all(Event(name="leaderboard", data=project_leaderboard(s.players.values())))

    reset = stop

    # ---- round lifecycle ----

    def advance_round(self) -> None:
        s = self.session
        self.timer.cancel()
        for p in s.players.values():
            p.reset_round()

        if s.item_index >= self.settings.ITEMS_PER_GAME:
            s.phase = Phase.RESULTS
            s.accepting_answers = False
            logger.info("game over after %d questions", s.question_number)
            self.gateway.send_to_all(Event(name="gameOver", data=project_leaderboard(s.players.values())))
            return

        s.question_number += 1
        if s.round_step == RoundStep.SYMBOLIC:
            s.current_question = self.generator.generate_symbol_round(s)
            event_name = "newQuestion"
        else:
            s.current_question = self.generator.generate_phonetic_round(s)
            event_name = "hiraganaQuestion"
        s.question_started_at = self.clock()
        s.accepting_answers = True
        logger.info("question %d/%d (%s)", s.question_number, s.total_questions, s.current_question.kind.value)

        payload = NewQuestionOut(
            question=QuestionOut.from_question(s.current_question),
            question_number=s.question_number,
            total=s.total_questions,
            time_limit=self.settings.QUESTION_TIME_LIMIT_MS,
        )
        self.gateway.send_to_all(Event(name=event_name, data=payload))
        self.timer.arm(QUESTION_TIMER, self.settings.QUESTION_TIME_LIMIT_MS, self.on_time_expired)

    def on_time_expired(self) -> None:
        s = self.session
        self.timer.cancel()
        s.accepting_answers = False
        subject = s.current_subject
        assert subject is not None

        self.gateway.send_to_all(Event(name="timeUp"))
        self.gateway.send_to_all(
            Event(
                name="showAnswer",
                data=ShowAnswerOut(
                    symbol=subject.symbol,
                    phonetic=subject.phonetic,
                    meaning=subject.meaning,
                    picture=subject.picture,
                ),
            )
        )
        self.timer.arm(REVEAL_TIMER, self.settings.REVEAL_DURATION_MS, self.after_reveal)

    def after_reveal(self) -> None:
        s = self.session
        if s.round_step == RoundStep.SYMBOLIC:
            s.round_step = RoundStep.PHONETIC
        else:
            s.round_step = RoundStep.SYMBOLIC
            s.item_index += 1
        self.advance_round()

    def _check_all_answered(self) -> None:
        s = self.session
        if not s.players or not s.accepting_answers or s.paused:
            return
        if all(p.answered for p in s.players.values()):
            logger.debug("everyone answered question %d, revealing early", s.question_number)
            self.on_time_expired()

    # ---- views ----

    def _publish_players(self) -> None:
        players = self.session.players.values()
        self.gateway.send_to_all(Event(name="playerList", data=[p.name for p in players]))
        self.gateway.send_to_all(Event(name="leaderboard", data=project_leaderboard(players)))

    def snapshot(self) -> SessionSnapshotOut:
        s = self.session
        q = s.current_question if s.accepting_answers else None
        return SessionSnapshotOut(
            phase=s.phase,
            paused=s.paused,
            question_number=s.question_number,
            total=s.total_questions,
            players=[p.name for p in s.players.values()],
            leaderboard=project_leaderboard(s.players.values()),
            current_question=QuestionOut.from_question(q) if q else None,
        )


class SessionActor:
    """Single consumer of a command queue.

    ``submit`` never blocks; commands run one at a time in submission order on
    the event loop that called ``start``.
    """

    def __init__(self, name: str = "session"):
        self.name = name
        self._queue: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is not None:
            return
        self._queue = asyncio.Queue()
        self._task = asyncio.create_task(self._run(), name=f"{self.name}-actor")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        self._queue = None

    def submit(self, handler: Callable[..., None], *args: Any) -> None:
        if self._queue is None:
            logger.warning("%s actor is not running; dropping %s", self.name, getattr(handler, "__name__", handler))
            return
        self._queue.put_nowait((handler, args))

    async def drain(self) -> None:
        """Wait until every command submitted so far has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def _run(self) -> None:
        assert self._queue is not None
        queue = self._queue
        while True:
            handler, args = await queue.get()
            try:
                handler(*args)
            except Exception:
                logger.exception("%s actor: %s failed", self.name, getattr(handler, "__name__", handler))
            finally:
                queue.task_done()
