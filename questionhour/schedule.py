# -*- coding: utf-8 -*-
"""Daily question schedule.

A CSV or Excel sheet with one row per day: ``date, question, theme``.
Column names are matched loosely (``text`` / ``prompt`` for the question,
``day`` for the date).
"""
from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd

ALLOWED = {".xlsx", ".xls", ".csv"}

COL_MAP = {
    "date": "date",
    "day": "date",
    "question": "text",
    "text": "text",
    "prompt": "text",
    "theme": "theme",
    "topic": "theme",
}


def _standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]
    df.columns = [COL_MAP.get(c, c) for c in df.columns]
    return df


def _read_any(path: Path) -> pd.DataFrame:
    suf = path.suffix.lower()
    if suf not in ALLOWED:
        raise ValueError(f"Unsupported file type: {suf}")
    if suf == ".csv":
        return pd.read_csv(path, encoding="utf-8-sig")
    return pd.read_excel(path, engine="openpyxl")


def load_schedule(path) -> pd.DataFrame:
    """Read the schedule into a frame with ``date`` (datetime.date), ``text``, ``theme``."""
    df = _read_any(Path(path))
    df = df.dropna(how="all")
    df = _standardize_columns(df)
    missing = [c for c in ("date", "text") if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")
    if "theme" not in df.columns:
        df["theme"] = "general"

    df["date"] = pd.to_datetime(df["date"], errors="coerce").dt.date
    df["text"] = df["text"].astype(str).str.strip()
    df["theme"] = df["theme"].fillna("general").astype(str).str.strip()
    df = df[df["date"].notna() & (df["text"] != "") & (df["text"].str.lower() != "nan")]
    return df[["date", "text", "theme"]].reset_index(drop=True)


def question_for(schedule: pd.DataFrame, day: date) -> Optional[dict]:
    """Scheduled question for ``day``; the last row wins when a day repeats."""
    rows = schedule[schedule["date"] == day]
    if rows.empty:
        return None
    row = rows.iloc[-1]
    return {"text": row["text"], "theme": row["theme"]}
