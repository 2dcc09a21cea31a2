from __future__ import annotations

import pytest

from meal_tally.models.config_models import ColumnConfig
from meal_tally.models.person_record import PB_SENTINEL, RowKind
from meal_tally.services.aggregator import Aggregator

COLUMNS = ColumnConfig(name_column="A", meal_columns=("B", "C", "D", "E"))


def row(name, *meals):
    return [name, *meals]


def _run(rows):
    agg = Aggregator()
    for r in rows:
        agg.ingest(r, COLUMNS)
    return {line.key: line for line in agg.finalize()}


def test_packed_lunch_only_person_gets_pb_sentinel():
    lines = _run([row("Ana", "PB"), row("ana", "pb", None, 0)])
    ana = lines["ana"]
    assert ana.total == PB_SENTINEL
    assert ana.pb_days == 2
    assert ana.meal_days == 0
    assert ana.rows_seen == 2


def test_absence_overrides_numeric_siblings():
    lines = _run([row("Rui", "A", 2, 3, 1)])
    assert lines["rui"].total == 0
    assert lines["rui"].rows_seen == 1
    assert lines["rui"].meal_days == 0


def test_mixed_meal_and_packed_lunch_is_numeric():
    lines = _run([row("Eva", 1, 1, 1), row("Eva", "PB")])
    eva = lines["eva"]
    assert eva.total == 3
    assert eva.pb_days == 1
    assert eva.meal_days == 1
    assert eva.rows_seen == 2


def test_meal_zero_counts_row_only():
    lines = _run([row("Ivo", None, "x")])
    assert lines["ivo"].total == 0
    assert lines["ivo"].rows_seen == 1
    assert lines["ivo"].meal_days == 0


def test_packed_lunch_then_absence_is_still_pb():
    lines = _run([row("Lia", "PB"), row("Lia", "F")])
    assert lines["lia"].total == PB_SENTINEL
    assert lines["lia"].rows_seen == 2


def test_rows_without_name_are_skipped():
    agg = Aggregator()
    assert agg.ingest(row(None, 1), COLUMNS) is None
    assert agg.ingest(row(7, 1), COLUMNS) is None
    assert agg.ingest(row("Nome", 1), COLUMNS) is None
    assert len(agg) == 0


def test_ingest_returns_classification():
    agg = Aggregator()
    assert agg.ingest(row("Ana", "PB"), COLUMNS).kind is RowKind.PACKED_LUNCH


def test_spellings_merge_and_best_display_wins():
    lines = _run([row("JOSE SILVA", 1), row("José Silva*", 1), row("jose silva", 1)])
    assert list(lines) == ["jose silva"]
    assert lines["jose silva"].name == "José Silva"
    assert lines["jose silva"].total == 3


def test_decimal_totals_are_kept():
    lines = _run([row("Ana", "0,5"), row("Ana", 1)])
    assert lines["ana"].total == pytest.approx(1.5)


def test_fractional_totals_do_not_depend_on_row_order():
    forward = _run([row("Ana", "0,1"), row("Ana", "0,2"), row("Ana", "0,3")])
    backward = _run([row("Ana", "0,3"), row("Ana", "0,2"), row("Ana", "0,1")])
    assert forward["ana"].total == backward["ana"].total == 0.6
    assert isinstance(forward["ana"].total, float)


def test_rows_seen_counts_every_row_kind():
    agg = Aggregator()
    rows = [row("Ana", 1), row("Ana", "A"), row("Ana", "PB"), row("Ana", None)]
    kinds = [agg.ingest(r, COLUMNS).kind for r in rows]
    line = agg.finalize()[0]
    absent = kinds.count(RowKind.ABSENT)
    meals = kinds.count(RowKind.MEAL)
    assert line.rows_seen == line.pb_days + absent + meals == 4


def test_finalize_resets_state_and_is_idempotent():
    rows = [row("Ana", 2), row("Rui", "PB"), row("ana", 1)]
    agg = Aggregator()
    agg.ingest_sheet(rows, COLUMNS)
    first = agg.finalize()
    assert len(agg) == 0
    agg.ingest_sheet(rows, COLUMNS)
    assert agg.finalize() == first


def test_ingest_sheet_honours_start_row():
    agg = Aggregator()
    counted = agg.ingest_sheet([row("Banner", 9), row("Ana", 1), row(None, 1)], COLUMNS, start_row=1)
    assert counted == 1
    assert [line.key for line in agg.finalize()] == ["ana"]


def test_first_seen_order():
    lines = _run([row("Rui", 1), row("Ana", 1), row("rui", 1)])
    assert list(lines) == ["rui", "ana"]


def test_totals_never_negative():
    lines = _run([row("Ana", -5, "-2", 1)])
    assert lines["ana"].total == 1
