from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for everything that goes over the socket: camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Phase(str, Enum):
    LOBBY = "lobby"
    ACTIVE = "active"
    RESULTS = "results"


class RoundStep(str, Enum):
    SYMBOLIC = "symbolic"
    PHONETIC = "phonetic"


class QuestionKind(str, Enum):
    SYMBOL_TO_PICTURE = "symbolToPicture"
    PICTURE_TO_SYMBOL = "pictureToSymbol"
    SYMBOL_TO_PHONETIC = "symbolToPhonetic"


class CatalogItem(WireModel):
    model_config = ConfigDict(frozen=True)

    id: str
    symbol: str
    phonetic: str
    meaning: str
    picture: str


class QuestionOption(WireModel):
    id: str
    display: str


class Question(WireModel):
    kind: QuestionKind
    prompt: str
    options: List[QuestionOption]
    correct_id: str


class AnswerOutcome(WireModel):
    correct: bool
    points: int = 0


class Player(WireModel):
    id: str
    name: str
    score: int = 0
    answered: bool = False
    last_answer: Optional[AnswerOutcome] = None

    def reset_round(self) -> None:
        self.answered = False
        self.last_answer = None

    def reset_game(self) -> None:
        self.score = 0
        self.reset_round()


class LeaderboardEntry(WireModel):
    rank: int
    id: str
    name: str
    score: int


# Phases: lobby -> active -> results -> (start) active ... ; stop/reset -> lobby from anywhere
class Session(BaseModel):
    phase: Phase = Phase.LOBBY
    players: Dict[str, Player] = Field(default_factory=dict)
    current_question: Optional[Question] = None
    current_subject: Optional[CatalogItem] = None
    question_started_at: Optional[float] = None  # monotonic ms
    question_number: int = 0
    total_questions: int = 20
    used_item_ids: Set[str] = Field(default_factory=set)
    round_step: RoundStep = RoundStep.SYMBOLIC
    item_index: int = 0
    paused: bool = False
    remaining_at_pause: Optional[float] = None
    accepting_answers: bool = False

    def clear_round_state(self) -> None:
        self.current_question = None
        self.current_subject = None
        self.question_started_at = None
        self.question_number = 0
        self.used_item_ids.clear()
        self.round_step = RoundStep.SYMBOLIC
        self.item_index = 0
        self.paused = False
        self.remaining_at_pause = None
        self.accepting_answers = False
