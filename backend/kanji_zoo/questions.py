from __future__ import annotations

import random
from typing import Callable, List, Optional, Sequence

from .catalog import ANIMALS
from .models import CatalogItem, Question, QuestionKind, QuestionOption, Session


class QuestionGenerator:
    """Builds the multiple-choice rounds for one game session.

    Each catalog item is covered by two rounds: a symbol round (kanji to
    picture or picture to kanji, picked at random) followed by a phonetic
    round for the same item (kanji to hiragana). Items are not repeated until
    every item in the catalog has been used once.
    """

    def __init__(
        self,
        catalog: Sequence[CatalogItem] = ANIMALS,
        choice_count: int = 4,
        rng: Optional[random.Random] = None,
    ):
        if len(catalog) < choice_count:
            raise ValueError(f"Catalog needs at least {choice_count} items, got {len(catalog)}")
        self.catalog = list(catalog)
        self.choice_count = choice_count
        self.rng = rng or random.Random()

    def generate_symbol_round(self, session: Session) -> Question:
        available = [a for a in self.catalog if a.id not in session.used_item_ids]
        if not available:
            session.used_item_ids.clear()
            available = self.catalog

        correct = self.rng.choice(available)
        session.used_item_ids.add(correct.id)
        session.current_subject = correct

        if self.rng.random() < 0.5:
            kind = QuestionKind.SYMBOL_TO_PICTURE
            prompt = correct.symbol
            display: Callable[[CatalogItem], str] = lambda a: a.picture
        else:
            kind = QuestionKind.PICTURE_TO_SYMBOL
            prompt = correct.picture
            display = lambda a: a.symbol

        return Question(
            kind=kind,
            prompt=prompt,
            options=self._options(correct, display),
            correct_id=correct.id,
        )

    def generate_phonetic_round(self, session: Session) -> Question:
        # Reuses the subject of the symbol round that just finished.
        correct = session.current_subject
        assert correct is not None
        return Question(
            kind=QuestionKind.SYMBOL_TO_PHONETIC,
            prompt=correct.symbol,
            options=self._options(correct, lambda a: a.phonetic),
            correct_id=correct.id,
        )

    def _options(self, correct: CatalogItem, display: Callable[[CatalogItem], str]) -> List[QuestionOption]:
        others = [a for a in self.catalog if a.id != correct.id]
        picks = [correct, *self.rng.sample(others, self.choice_count - 1)]
        self.rng.shuffle(picks)
        return [QuestionOption(id=a.id, display=display(a)) for a in picks]
