"""
Keyword-based incident classification.

The violent-crime classifier is a heuristic: a type name is violent if it
contains any of VIOLENT_KEYWORDS as a case-insensitive substring. It is not
an authoritative offense taxonomy, and false positives/negatives are expected.
Both the Python predicate and the SQL clause are built from the same table so
every aggregate counts the same incidents as violent.
"""

from dataclasses import dataclass

from sqlalchemy import or_
from sqlalchemy.sql.elements import ColumnElement

VIOLENT_KEYWORDS: tuple[str, ...] = (
    "SHOOT",
    "SHOTS FIRED",
    "STAB",
    "ASSAULT",
    "FIGHT",
    "ROBBERY",
    "HOMICIDE",
    "CARJACK",
)


@dataclass(frozen=True)
class Category:
    """Display category for a family of incident types."""

    name: str
    keywords: tuple[str, ...]
    emoji: str


# Evaluated in order; first match wins.
CATEGORIES: tuple[Category, ...] = (
    Category("violent", ("SHOOT", "SHOTS FIRED", "STAB", "HOMICIDE"), "🔴"),
    Category("assault", ("ASSAULT", "FIGHT", "DOMESTIC"), "🔴"),
    Category("robbery", ("ROBBERY", "CARJACK"), "🟠"),
    Category("property", ("BURGLARY", "THEFT", "STEALING"), "🟡"),
    Category("alarm", ("ALARM",), "🔔"),
    Category("traffic", ("ACCIDENT", "CRASH", "HIT AND RUN"), "🚗"),
    Category("fire", ("FIRE",), "🔥"),
    Category("medical", ("MEDICAL", "OVERDOSE", "UNCONSCIOUS"), "🚑"),
    Category("suspicious", ("SUSPICIOUS",), "👀"),
    Category("welfare", ("MISSING", "WELFARE"), "🔍"),
)

OTHER = Category("other", (), "📋")


def _matches(text: str, keywords: tuple[str, ...]) -> bool:
    upper = text.upper()
    return any(keyword in upper for keyword in keywords)


def is_violent(type_name: str | None) -> bool:
    """Return True if the type name matches the violent keyword table."""
    if not type_name:
        return False
    return _matches(type_name, VIOLENT_KEYWORDS)


def violent_clause(column) -> ColumnElement[bool]:
    """SQL predicate equivalent to is_violent() for the given column."""
    return or_(*(column.ilike(f"%{keyword}%") for keyword in VIOLENT_KEYWORDS))


def classify(type_code: str | None, type_name: str | None) -> Category:
    """Pick the display category for an incident from its code and name."""
    text = f"{type_code or ''} {type_name or ''}"
    for category in CATEGORIES:
        if _matches(text, category.keywords):
            return category
    return OTHER
