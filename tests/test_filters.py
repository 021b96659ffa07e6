import datetime as dt

from ripdash.analytics.context import ViewContext
from ripdash.analytics.filters import apply_filters, matches
from ripdash.data.schemas import FilterSpec, Record, TypeSelector


def _ids(rows):
    return [r.id for r in rows]


def test_no_filters_returns_everything(records):
    assert _ids(apply_filters(records)) == ["1", "2", "3", "4", "5", "6"]
    assert _ids(apply_filters(records, FilterSpec())) == ["1", "2", "3", "4", "5", "6"]


def test_student_filter(records):
    assert _ids(apply_filters(records, FilterSpec(student_key="ana perez"))) == ["1", "2", "3"]


def test_teacher_filter_is_normalized(records):
    assert _ids(apply_filters(records, FilterSpec.from_values(teacher="LAURA"))) == ["1", "3", "5"]


def test_type_filter(records):
    assert _ids(apply_filters(records, FilterSpec.from_values(entry_type="pago"))) == ["2", "6"]
    assert _ids(apply_filters(records, FilterSpec.from_values(entry_type="clase"))) == ["1", "3", "4", "5"]


def test_other_entry_type_matches_neither_selector():
    rec = Record.build(student_name="Ana", entry_type="Ajuste")
    assert matches(rec, FilterSpec())
    assert not matches(rec, FilterSpec(entry_type=TypeSelector.CLASS))
    assert not matches(rec, FilterSpec(entry_type=TypeSelector.PAYMENT))


def test_service_filter_accepts_several(records):
    spec = FilterSpec.from_values(services=["piano", "Canto"])
    assert _ids(apply_filters(records, spec)) == ["1", "2", "3", "5", "6"]


def test_date_range_is_inclusive_by_day(records):
    spec = FilterSpec.from_values(date_from="2026-01-05", date_to=dt.date(2026, 1, 10))
    assert _ids(apply_filters(records, spec)) == ["1", "3", "4"]


def test_undated_rows_fail_any_date_bound(records):
    only_from = FilterSpec.from_values(date_from="2000-01-01")
    assert "5" not in _ids(apply_filters(records, only_from))
    only_to = FilterSpec.from_values(date_to="2100-01-01")
    assert "5" not in _ids(apply_filters(records, only_to))


def test_combined_filters_are_an_intersection(records):
    teacher = FilterSpec.from_values(teacher="laura")
    piano = FilterSpec.from_values(services=["Piano"])
    both = FilterSpec.from_values(teacher="laura", services=["Piano"])
    expected = set(_ids(apply_filters(records, teacher))) & set(_ids(apply_filters(records, piano)))
    assert set(_ids(apply_filters(records, both))) == expected == {"1", "5"}


def test_from_values_unbounded_dates():
    spec = FilterSpec.from_values(entry_type="all")
    assert spec.entry_type == TypeSelector.ALL
    assert spec.date_from is None and spec.date_to is None
    assert not spec.has_date_bounds


def test_view_context_carries_filters(records, students):
    ctx = ViewContext(records=records, students=students)
    narrowed = ctx.with_filters(FilterSpec.from_values(entry_type="payment"))
    assert _ids(narrowed.filtered()) == ["2", "6"]
    # the original context is untouched
    assert len(ctx.filtered()) == 6


def test_mixed_type_label_matches_both_selectors():
    rec = Record.build(student_name="Ana", entry_type="Pago clase")
    assert matches(rec, FilterSpec.from_values(entry_type="clase"))
    assert matches(rec, FilterSpec.from_values(entry_type="pago"))
