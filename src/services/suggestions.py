# src/services/suggestions.py
from __future__ import annotations

from typing import Collection, Dict, Iterable, List, Optional

from sqlalchemy import case, false, func, literal, or_, select
from sqlalchemy.orm import Session

from src.models.user import User
from src.utils.user import interest_keys


def _interest_elements(db: Session):
    """
    users.interests (JSON-массив) как табличная функция с колонкой value:
    json_array_elements_text в Postgres, json_each в SQLite.
    """
    if db.get_bind().dialect.name == "postgresql":
        fn = func.json_array_elements_text(User.interests)
    else:
        fn = func.json_each(User.interests)
    return fn.table_valued("value", joins_implicitly=True)


def shared_interest_count(db: Session, keys: Collection[str]):
    """Коррелированный подзапрос: сколько интересов пользователя входит в keys (без регистра)."""
    if not keys:
        return literal(0)
    elems = _interest_elements(db)
    return (
        select(func.count())
        .select_from(elems)
        .where(func.lower(elems.c.value).in_(sorted(keys)))
        .scalar_subquery()
    )


def interest_overlap(db: Session, keys: Collection[str]):
    """Условие "есть хотя бы один общий интерес" для WHERE."""
    if not keys:
        return false()
    elems = _interest_elements(db)
    return (
        select(literal(1))
        .select_from(elems)
        .where(func.lower(elems.c.value).in_(sorted(keys)))
        .exists()
    )


def rank_suggestions(
    db: Session,
    *,
    course: Optional[str],
    interests: Iterable[str],
    excluded_ids: Iterable[int],
    limit: int = 20,
) -> List[Dict]:
    """
    Кандидаты в связи: тот же курс ИЛИ хотя бы один общий интерес.
    Никого из excluded_ids (сам пользователь и его сеть) не возвращаем.
    Сортировка: больше общих интересов -> совпадение курса -> id. Всё считает БД.
    """
    my_keys = interest_keys(interests)
    if not course and not my_keys:
        return []

    shared = shared_interest_count(db, my_keys)
    same_course = case((User.course == course, 1), else_=0) if course else literal(0)

    matches = []
    if course:
        matches.append(User.course == course)
    if my_keys:
        matches.append(interest_overlap(db, my_keys))

    # в ORDER BY только выражения, без констант
    order = []
    if my_keys:
        order.append(shared.desc())
    if course:
        order.append(same_course.desc())

    rows = (
        db.query(User, shared.label("shared"), same_course.label("same_course"))
        .filter(User.id.notin_(list(excluded_ids)), or_(*matches))
        .order_by(*order, User.id.asc())
        .limit(limit)
        .all()
    )

    return [
        {
            "id": user.id,
            "name": user.name,
            "course": user.course,
            "semester": user.semester,
            "interests": list(user.interests or []),
            "shared_interests": int(shared_count or 0),
            "same_course": bool(is_same_course),
        }
        for user, shared_count, is_same_course in rows
    ]
