from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from .models import LeaderboardEntry, Phase, Question, QuestionKind, QuestionOption, WireModel


# ---- inbound ----

class JoinIn(WireModel):
    type: Literal["join"]
    name: str


class AnswerIn(WireModel):
    type: Literal["answer"]
    option_id: str


class HostCommandIn(WireModel):
    type: Literal["hostStartGame", "hostPauseGame", "hostResumeGame", "hostStopGame", "hostResetGame"]


InboundMessage = Annotated[Union[JoinIn, AnswerIn, HostCommandIn], Field(discriminator="type")]

inbound_adapter = TypeAdapter(InboundMessage)


# ---- outbound ----

class JoinedOut(WireModel):
    phase: Phase


class QuestionOut(WireModel):
    """A question as shown to clients: the answer key stays on the server."""

    kind: QuestionKind
    prompt: str
    options: List[QuestionOption]

    @classmethod
    def from_question(cls, q: Question) -> "QuestionOut":
        return cls(kind=q.kind, prompt=q.prompt, options=q.options)


class NewQuestionOut(WireModel):
    question: QuestionOut
    question_number: int
    total: int
    time_limit: int


class ShowAnswerOut(WireModel):
    symbol: str
    phonetic: str
    meaning: str
    picture: str


class GameResumedOut(WireModel):
    time_remaining: int


class SessionSnapshotOut(WireModel):
    phase: Phase
    paused: bool
    question_number: int
    total: int
    players: List[str]
    leaderboard: List[LeaderboardEntry]
    current_question: Optional[QuestionOut] = None
