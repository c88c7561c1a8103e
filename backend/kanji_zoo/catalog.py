"""The fixed set of animals the game quizzes on."""

from __future__ import annotations

from typing import Tuple

from .models import CatalogItem


def _item(symbol: str, phonetic: str, meaning: str, picture: str) -> CatalogItem:
    return CatalogItem(id=symbol, symbol=symbol, phonetic=phonetic, meaning=meaning, picture=picture)


ANIMALS: Tuple[CatalogItem, ...] = (
    _item("犬", "いぬ", "dog", "🐕"),
    _item("猫", "ねこ", "cat", "🐱"),
    _item("鳥", "とり", "bird", "🐦"),
    _item("魚", "さかな", "fish", "🐟"),
    _item("馬", "うま", "horse", "🐴"),
    _item("牛", "うし", "cow", "🐄"),
    _item("虫", "むし", "insect", "🐛"),
    _item("羊", "ひつじ", "sheep", "🐑"),
    _item("熊", "くま", "bear", "🐻"),
    _item("豚", "ぶた", "pig", "🐷"),
    _item("兎", "うさぎ", "rabbit", "🐰"),
    _item("象", "ぞう", "elephant", "🐘"),
)

