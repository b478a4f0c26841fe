# tutorlink/db/filters.py
# Query predicates shared by the list endpoints
#
# JSON list columns (selected_subjects, selected_categories) are matched on
# their serialized text: '["Math", "বাংলা"]' contains '"বাংলা"'. This relies on
# the engine writing JSON with ensure_ascii=False (see tutorlink.db.session).

import json

from sqlalchemy import String, cast

LIKE_ESCAPE = "\\"


def like_escape(value: str) -> str:
    """Make user input literal inside a LIKE pattern."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def contains_text(column, value: str):
    """Case-insensitive substring match, wildcards in `value` taken literally."""
    return column.ilike(f"%{like_escape(value)}%", escape=LIKE_ESCAPE)


def json_list_contains(column, value: str):
    """True when the JSON list in `column` has `value` as one of its items."""
    needle = json.dumps(value.strip(), ensure_ascii=False)
    return cast(column, String).ilike(f"%{like_escape(needle)}%", escape=LIKE_ESCAPE)
