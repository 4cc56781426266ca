import pytest

from feedback_api.filters import PredicateBuilder, feedback_filters


def test_empty_builder_has_no_condition():
    builder = PredicateBuilder()
    assert builder.clauses() == []
    assert builder.condition() is None


def test_none_values_are_skipped():
    builder = feedback_filters(None, None)
    assert builder.predicates == []

    builder = feedback_filters("", 3)
    assert builder.predicates == [("overall_rating", "=", 3)]


def test_values_become_bound_parameters():
    builder = feedback_filters("course", 4)
    assert builder.params() == ["course", 4]

    compiled = builder.condition().compile()
    sql = str(compiled)
    assert "course" not in sql
    assert "feedback.feedback_type = :" in sql
    assert "feedback.overall_rating = :" in sql
    assert sorted(compiled.params.values(), key=str) == [4, "course"]


def test_where_any_adds_one_or_conjunct():
    builder = (
        PredicateBuilder()
        .where_any([("name", "like", "%ab%"), ("subject_course", "like", "%ab%")])
        .where("overall_rating", ">=", 2)
    )
    clauses = builder.clauses()
    assert len(clauses) == 2
    assert " OR " in str(clauses[0])
    assert " OR " not in str(clauses[1])


def test_where_any_skips_none_members():
    builder = PredicateBuilder().where_any([("name", "=", None), ("email", "=", None)])
    assert builder.clauses() == []


@pytest.mark.parametrize("column, op", [("nope", "="), ("name", "~~")])
def test_rejects_unknown_column_or_operator(column, op):
    with pytest.raises(ValueError):
        PredicateBuilder().where(column, op, "x")


def test_zero_rating_is_no_filter():
    assert feedback_filters("course", 0).predicates == [("feedback_type", "=", "course")]
