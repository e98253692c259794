"""Справочник параметров тела: порядок, названия, единицы."""

# Порядок полей формы (как в карточках и на графике)
MEASUREMENT_KINDS = [
    "chest",
    "biceps",
    "waist",
    "thighs",
    "hips",
    "neck",
    "forearms",
    "weight",
]

KIND_TITLES = {
    "chest": "Грудь",
    "biceps": "Бицепс",
    "waist": "Талия",
    "thighs": "Бёдра",
    "hips": "Ягодицы",
    "neck": "Шея",
    "forearms": "Предплечья",
    "weight": "Вес",
}

# Синонимы для ввода текстом
KIND_ALIASES = {
    "грудь": "chest",
    "бицепс": "biceps",
    "талия": "waist",
    "бедра": "thighs",
    "бёдра": "thighs",
    "ягодицы": "hips",
    "шея": "neck",
    "предплечья": "forearms",
    "предплечье": "forearms",
    "вес": "weight",
    "bicep": "biceps",
    "thigh": "thighs",
    "forearm": "forearms",
}

WEIGHT_UNIT = "кг"
LENGTH_UNIT = "см"


def unit_for(kind: str) -> str:
    """Единица измерения: weight — масса, всё остальное — длина."""
    return WEIGHT_UNIT if kind == "weight" else LENGTH_UNIT


def title_for(kind: str) -> str:
    """Человекочитаемое название параметра."""
    return KIND_TITLES.get(kind, kind.capitalize())


def normalize_kind(name: str) -> str:
    """Приводит название параметра к каноническому виду."""
    key = name.strip().lower()
    return KIND_ALIASES.get(key, key)
