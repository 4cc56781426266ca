"""Composable filter predicates for feedback queries.

A predicate is a ``(column, operator, value)`` tuple. The builder folds a
list of them into SQLAlchemy clauses; values become bound parameters, never
part of the SQL text. Predicates whose value is ``None`` are dropped, which
is how optional query-string filters are expressed.

    builder = PredicateBuilder().where("feedback_type", "=", "course")
    db.query(Feedback).filter(*builder.clauses())
"""

import operator
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import and_, or_

from .models import Feedback

Predicate = Tuple[str, str, Any]

OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "like": lambda column, value: column.like(value),
    "ilike": lambda column, value: column.ilike(value),
}


class PredicateBuilder:
    def __init__(self, model=Feedback):
        self._model = model
        self._groups: List[Tuple[str, List[Predicate]]] = []

    def where(self, column: str, op: str, value: Any) -> "PredicateBuilder":
        if value is None:
            return self
        self._check(column, op)
        self._groups.append(("and", [(column, op, value)]))
        return self

    def where_any(self, predicates: Iterable[Predicate]) -> "PredicateBuilder":
        """Add one conjunct that matches when any of ``predicates`` matches."""
        kept = [p for p in predicates if p[2] is not None]
        for column, op, _ in kept:
            self._check(column, op)
        if kept:
            self._groups.append(("or", kept))
        return self

    @property
    def predicates(self) -> List[Predicate]:
        return [p for _, group in self._groups for p in group]

    def params(self) -> List[Any]:
        return [value for _, _, value in self.predicates]

    def clauses(self) -> list:
        out = []
        for kind, group in self._groups:
            built = [self._build(p) for p in group]
            if kind == "or" and len(built) > 1:
                out.append(or_(*built))
            else:
                out.extend(built)
        return out

    def condition(self) -> Optional[Any]:
        clauses = self.clauses()
        if not clauses:
            return None
        return and_(*clauses)

    def _check(self, column: str, op: str) -> None:
        if op not in OPERATORS:
            raise ValueError(f"Unsupported operator: {op}")
        if column not in self._model.__table__.columns:
            raise ValueError(f"Unknown column: {column}")

    def _build(self, predicate: Predicate):
        column, op, value = predicate
        return OPERATORS[op](getattr(self._model, column), value)


def feedback_filters(feedback_type: Optional[str] = None, rating: Optional[int] = None) -> PredicateBuilder:
    return (
        PredicateBuilder()
        .where("feedback_type", "=", feedback_type or None)
        .where("overall_rating", "=", rating or None)
    )
