from __future__ import annotations

import logging

from sqlalchemy import inspect

from app.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "schools": {"id", "academic_year", "current_semester"},
    "schedule_entries": {
        "id",
        "school_id",
        "day",
        "time_slot_id",
        "academic_year",
        "semester",
        "class_group_id",
        "teacher_ids",
        "location_id",
    },
    "substitutions": {
        "id",
        "school_id",
        "substitution_date",
        "absent_teacher_id",
        "substitute_teacher_id",
        "original_schedule_entry_id",
    },
    "attendance_logs": {
        "id",
        "school_id",
        "attendance_date",
        "original_schedule_entry_id",
        "original_teacher_ids",
        "actual_teacher_ids",
    },
}


def schema_gaps(connection) -> tuple[list[str], dict[str, list[str]]]:
    """Required tables that are absent, and required columns absent from present tables."""
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    for table_name, columns in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            missing_tables.append(table_name)
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        absent = sorted(columns - existing)
        if absent:
            missing_columns[table_name] = absent
    return missing_tables, missing_columns


def missing_schema_items() -> dict[str, list[str]]:
    with engine.connect() as connection:
        missing_tables, missing = schema_gaps(connection)
    for table_name in missing_tables:
        missing[table_name] = sorted(REQUIRED_COLUMNS[table_name])
    return missing


def ensure_runtime_schema_compatibility() -> None:
    """Warn at startup when the database lags behind the migrations."""
    missing = missing_schema_items()
    for table_name, columns in missing.items():
        logger.warning(
            "SCHEMA OUT OF DATE | table=%s | missing=%s | run `alembic upgrade head`",
            table_name,
            ",".join(columns),
        )
