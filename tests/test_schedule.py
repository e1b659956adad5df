from datetime import date

import pandas as pd
import pytest

from questionhour.schedule import load_schedule, question_for


def test_load_csv_with_loose_headers(tmp_path):
    path = tmp_path / "schedule.csv"
    path.write_text(
        "Day,Question,Topic\n"
        "2024-05-01,Did you bike today?,transportation\n"
        "2024-05-02,Is it raining?,\n"
        "not-a-date,Ignored,misc\n",
        encoding="utf-8",
    )
    schedule = load_schedule(path)
    assert list(schedule.columns) == ["date", "text", "theme"]
    assert len(schedule) == 2
    assert question_for(schedule, date(2024, 5, 1)) == {"text": "Did you bike today?", "theme": "transportation"}
    assert question_for(schedule, date(2024, 5, 2))["theme"] == "general"
    assert question_for(schedule, date(2024, 5, 3)) is None


def test_load_excel(tmp_path):
    path = tmp_path / "schedule.xlsx"
    pd.DataFrame({"date": ["2024-06-01"], "text": ["Coffee before noon?"]}).to_excel(path, index=False)
    schedule = load_schedule(path)
    assert question_for(schedule, date(2024, 6, 1)) == {"text": "Coffee before noon?", "theme": "general"}


def test_repeated_day_uses_last_row(tmp_path):
    path = tmp_path / "schedule.csv"
    path.write_text("date,question\n2024-05-01,first\n2024-05-01,second\n", encoding="utf-8")
    assert question_for(load_schedule(path), date(2024, 5, 1))["text"] == "second"


def test_missing_columns(tmp_path):
    path = tmp_path / "schedule.csv"
    path.write_text("date,theme\n2024-05-01,x\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_schedule(path)


def test_unsupported_file(tmp_path):
    path = tmp_path / "schedule.json"
    path.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError):
        load_schedule(path)
