import random
from unittest import TestCase

from .catalog import ANIMALS
from .models import QuestionKind, Session
from .questions import QuestionGenerator

ANIMALS_BY_ID = {a.id: a for a in ANIMALS}


class QuestionGeneratorTests(TestCase):
    def setUp(self) -> None:
        self.generator = QuestionGenerator(rng=random.Random(1234))
        self.session = Session()

    def _assert_well_formed(self, question):
        ids = [o.id for o in question.options]
        self.assertEqual(len(ids), 4)
        self.assertEqual(len(set(ids)), 4)
        self.assertEqual(ids.count(question.correct_id), 1)

    def test_options_are_well_formed(self):
        for _ in range(100):
            self._assert_well_formed(self.generator.generate_symbol_round(self.session))
            self._assert_well_formed(self.generator.generate_phonetic_round(self.session))

    def test_symbol_round_records_subject(self):
        q = self.generator.generate_symbol_round(self.session)
        self.assertEqual(self.session.current_subject.id, q.correct_id)
        self.assertEqual(self.session.used_item_ids, {q.correct_id})

    def test_orientation_matches_prompt_and_options(self):
        kinds = set()
        for _ in range(40):
            q = self.generator.generate_symbol_round(self.session)
            subject = ANIMALS_BY_ID[q.correct_id]
            kinds.add(q.kind)
            if q.kind == QuestionKind.SYMBOL_TO_PICTURE:
                self.assertEqual(q.prompt, subject.symbol)
                self.assertTrue(all(o.display == ANIMALS_BY_ID[o.id].picture for o in q.options))
            else:
                self.assertEqual(q.kind, QuestionKind.PICTURE_TO_SYMBOL)
                self.assertEqual(q.prompt, subject.picture)
                self.assertTrue(all(o.display == ANIMALS_BY_ID[o.id].symbol for o in q.options))
        self.assertEqual(kinds, {QuestionKind.SYMBOL_TO_PICTURE, QuestionKind.PICTURE_TO_SYMBOL})

    def test_no_repeats_until_catalog_exhausted(self):
        seen = [self.generator.generate_symbol_round(self.session).correct_id for _ in ANIMALS]
        self.assertEqual(sorted(seen), sorted(a.id for a in ANIMALS))

        # everything used: the pool starts over
        q = self.generator.generate_symbol_round(self.session)
        self.assertEqual(self.session.used_item_ids, {q.correct_id})

    def test_phonetic_round_reuses_subject(self):
        for _ in range(20):
            symbol_round = self.generator.generate_symbol_round(self.session)
            phonetic_round = self.generator.generate_phonetic_round(self.session)

            subject = ANIMALS_BY_ID[symbol_round.correct_id]
            self.assertEqual(phonetic_round.correct_id, subject.id)
            self.assertEqual(phonetic_round.kind, QuestionKind.SYMBOL_TO_PHONETIC)
            self.assertEqual(phonetic_round.prompt, subject.symbol)
            self.assertTrue(all(o.display == ANIMALS_BY_ID[o.id].phonetic for o in phonetic_round.options))

    def test_phonetic_round_does_not_draw_new_item(self):
        self.generator.generate_symbol_round(self.session)
        used = set(self.session.used_item_ids)
        self.generator.generate_phonetic_round(self.session)
        self.assertEqual(self.session.used_item_ids, used)

    def test_catalog_must_cover_choice_set(self):
        with self.assertRaises(ValueError):
            QuestionGenerator(catalog=ANIMALS[:3])
