from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from meal_tally.models.config_models import ColumnConfig, TallyConfig
from meal_tally.models.person_record import PB_SENTINEL
from meal_tally.services.orchestrator import ProcessingError, collect_input_files, process_all

"""End-to-end tally over real workbooks in the default layout (name E, meals I..L)."""


def att(name, i=None, j=None, k=None, l=None):
    return [None, None, None, None, name, None, None, None, i, j, k, l]


BANNER = [
    att("Escola Básica"),  # banner text in the name column
    att("Nome", "Almoço", "Lanche", "Jantar", "Ceia"),
]


@pytest.fixture()
def march_files(temp_workdir: Path, make_workbook) -> list[Path]:
    data = temp_workdir / "data"
    week1 = make_workbook(
        data / "week1.xlsx",
        {
            "Seg": BANNER + [att("José Silva*", 1, 1), att("Maria", "PB"), att("Rui", "A", 2, 2)],
            "Ter": BANNER + [att("JOSE SILVA", 1, None, 1), att("maria", "pb")],
        },
    )
    week2 = make_workbook(
        data / "week2.xlsx",
        {
            "Qua": BANNER + [att("Jose Silva", "1,5"), att("Rui", 2), att("Eva", 1), att("Eva", "PB")],
            "Vazia": [],
        },
    )
    return [week1, week2]


def _by_key(result):
    return {line.key: line for line in result.lines}


def test_tally_over_multiple_files(march_files):
    result = process_all(march_files, TallyConfig())

    assert result.success_files == 2
    assert result.failed_files == 0
    assert result.total_sheets == 3
    lines = _by_key(result)
    assert set(lines) == {"jose silva", "maria", "rui", "eva"}

    jose = lines["jose silva"]
    assert jose.name == "José Silva"
    assert jose.total == pytest.approx(5.5)
    assert jose.meal_days == 3
    assert jose.rows_seen == 3

    maria = lines["maria"]
    assert maria.total == PB_SENTINEL
    assert maria.pb_days == 2
    assert maria.meal_days == 0

    rui = lines["rui"]
    assert rui.total == 2  # absent row ignored despite numbers
    assert rui.rows_seen == 2

    eva = lines["eva"]
    assert eva.total == 1
    assert eva.pb_days == 1
    assert eva.meal_days == 1
    assert eva.rows_seen == 2
    assert result.total_rows == sum(l.rows_seen for l in result.lines) == 9


def test_file_order_changes_nothing_but_display_ties(march_files):
    forward = _by_key(process_all(march_files))
    backward = _by_key(process_all(list(reversed(march_files))))
    assert forward.keys() == backward.keys()
    for key, line in forward.items():
        other = backward[key]
        assert (line.total, line.pb_days, line.meal_days, line.rows_seen) == (
            other.total, other.pb_days, other.meal_days, other.rows_seen
        )


def test_runs_are_idempotent(march_files):
    assert process_all(march_files).lines == process_all(march_files).lines


def test_totals_non_negative(march_files):
    for line in process_all(march_files).lines:
        assert line.total == PB_SENTINEL or line.total >= 0


def test_forced_first_row(temp_workdir: Path, make_workbook):
    path = make_workbook(
        temp_workdir / "data" / "forced.xlsx",
        {"S": [att("Banner Person", 9), att("Ana", 1), att("Rui", 1)]},
    )
    detected = _by_key(process_all([path]))
    assert "banner person" in detected

    forced = _by_key(process_all([path], TallyConfig(columns=ColumnConfig(first_row=2))))
    assert set(forced) == {"ana", "rui"}


def test_directory_input_and_unreadable_file(temp_workdir: Path, make_workbook):
    data = temp_workdir / "data"
    make_workbook(data / "b.xlsx", {"S": [att("Ana", 1)]})
    make_workbook(data / "a.xlsx", {"S": [att("Rui", 2)]})
    (data / "c.xlsx").write_bytes(b"garbage")
    (data / "notes.txt").write_text("ignored", encoding="utf-8")
    (data / "legacy.xls").write_bytes(b"old binary format")

    assert [p.name for p in collect_input_files([data])] == ["a.xlsx", "b.xlsx", "c.xlsx"]

    result = process_all([data])

    assert result.success_files == 2
    assert result.failed_files == 1
    assert [l.key for l in result.lines] == ["rui", "ana"]
    assert [s.status for s in result.file_stats] == ["success", "success", "failed"]
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    assert "WORKBOOK_READ_ERROR" in logs[0].read_text(encoding="utf-8")


def test_missing_input_is_fatal(temp_workdir: Path):
    with pytest.raises(ProcessingError, match="input not found"):
        process_all([temp_workdir / "nope.xlsx"])


def test_fractional_totals_survive_file_reordering(temp_workdir: Path, make_workbook):
    data = temp_workdir / "data"
    files = [
        make_workbook(data / f"day{i}.xlsx", {"S": [att("Ana", value)]})
        for i, value in enumerate(["0,1", "0,2", "0,3"], start=1)
    ]
    forward = _by_key(process_all(files))
    backward = _by_key(process_all(list(reversed(files))))
    assert forward["ana"].total == backward["ana"].total == 0.6


def test_date_in_name_banner_is_not_a_person(temp_workdir: Path, make_workbook):
    path = make_workbook(
        temp_workdir / "data" / "dated.xlsx",
        {"S": [att(datetime(2024, 3, 1), "Refeicoes"), att("Nome"), att("Ana", 2)]},
    )
    result = process_all([path])
    assert [line.name for line in result.lines] == ["Ana"]
    assert result.lines[0].total == 2
    assert result.total_rows == 1
