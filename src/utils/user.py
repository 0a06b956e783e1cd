# src/utils/user.py
from typing import Iterable, List, Optional, Union


def normalize_interests(raw: Optional[Union[str, Iterable[str]]]) -> List[str]:
    """
    Приводит интересы к списку строк:
    1. Строку "a, b ,c" режет по запятым.
    2. Обрезает пробелы, выкидывает пустые.
    3. Убирает повторы без учёта регистра, сохраняя первое написание и порядок.
    """
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else list(raw)

    seen = set()
    result: List[str] = []
    for item in items:
        if not isinstance(item, str):
            continue
        value = item.strip()
        key = value.casefold()
        if not value or key in seen:
            continue
        seen.add(key)
        result.append(value)
    return result


def interest_keys(interests: Optional[Iterable[str]]) -> set:
    """Множество интересов для сравнения (lower, как func.lower в SQL)."""
    return {i.lower() for i in normalize_interests(interests)}
