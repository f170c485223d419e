"""Input loading (JSON, GEDCOM) and date handling utilities."""

from datetime import date
from pathlib import Path
import json
import re

from ged4py import GedcomReader

from models import NodePosition, Person


MONTHS = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

# Qualifiers that blur a date without changing the day it names
QUALIFIER_RE = re.compile(
    r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|CIRCA|CA\.?|AROUND):?\s*",
    re.IGNORECASE,
)

# (pattern, order of the year / month / day groups)
DATE_PATTERNS = [
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$"), "ymd"),  # 1839-08-29, ISO datetimes
    (re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$"), "ymd"),  # 1839/08/29
    (re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?,?\s*(\d{4})$"), "dmy"),  # 25 NOV 1954, 02 May1838
    (re.compile(r"^([A-Za-z]+)\.?\s*(\d{1,2}),\s*(\d{4})$"), "mdy"),  # April 17, 1850
    (re.compile(r"^([A-Za-z]+)\.?\s+(\d{1,2})\s+(\d{4})$"), "mdy"),  # Oct 12 1929
    (re.compile(r"^([A-Za-z]+)\.?,?\s*(\d{4})$"), "my"),  # NOV 1954, May, 1837
    (re.compile(r"^(\d{1,2})[-/.](\d{1,2})[-/.](\d{4})$"), "mdy"),  # 01-27-1920, 1/15/1957
    (re.compile(r"^(\d{4})$"), "y"),  # 1698
]


def _month_number(token: str) -> int | None:
    if token.isdigit():
        return int(token)
    return MONTHS.get(token.upper()[:3])


def parse_date(date_str: str | None) -> date | None:
    """
    Parse a birth or death date into a date.
    Returns None if the date cannot be parsed.

    Handles ISO dates as well as the spellings common in GEDCOM exports, such as
    "25 NOV 1954", "ABT 1905", "JAN 1905", "April 17, 1850" and "01/27/1920".
    A missing month or day defaults to the first.
    """
    if not date_str:
        return None

    s = str(date_str).strip().strip("()").rstrip("?").strip()
    s = QUALIFIER_RE.sub("", s).strip()
    if not s:
        return None

    for pattern, order in DATE_PATTERNS:
        match = pattern.match(s)
        if not match:
            continue
        parts = dict(zip(order, match.groups()))
        month = _month_number(parts.get("m", "1"))
        if month is None:
            continue
        try:
            # 00 month/day placeholders fall back to the first
            return date(int(parts["y"]), month or 1, int(parts.get("d", "1")) or 1)
        except ValueError:
            return None

    return None


def birth_sort_key(person: Person) -> date:
    """Sort key for birth order; undated people sort as the oldest."""
    return parse_date(person.birth_date) or date.min


def format_date(date_str: str | None) -> str:
    """Format a date as "Nov 25, 1954", or "Unknown"."""
    parsed = parse_date(date_str)
    if parsed is None:
        return "Unknown"
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def calculate_age(birth_date: str | None, death_date: str | None = None, today: date | None = None) -> int | None:
    """Age in whole years at death, or at `today` for the living."""
    birth = parse_date(birth_date)
    if birth is None:
        return None
    end = parse_date(death_date) if death_date else (today or date.today())
    if end is None:
        return None
    age = end.year - birth.year
    if (end.month, end.day) < (birth.month, birth.day):
        age -= 1
    return age


def load_people_json(filepath: Path) -> list[Person]:
    """
    Load person records from a JSON file.

    The document is either a list of camelCase person records or an object with a
    "people" list.
    """
    with open(filepath, "r", encoding="utf-8") as fh:
        data = json.load(fh)

    if isinstance(data, dict):
        data = data.get("people")
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of people in {filepath}")

    people: list[Person] = []
    for i, record in enumerate(data):
        if not isinstance(record, dict) or "id" not in record:
            raise ValueError(f"Person record {i} in {filepath} has no id")
        people.append(Person.from_dict(record))
    return people


def positions_to_dict(positions: dict[str, NodePosition]) -> dict[str, dict]:
    """Plain-data view of a position map, keyed by person id."""
    return {
        person_id: {
            "x": pos.x,
            "y": pos.y,
            "level": pos.level,
            "index": pos.index,
            "name": pos.person.full_name,
        }
        for person_id, pos in positions.items()
    }


def parse_gedcom(filepath: Path) -> GedcomReader:
    """Parse a GEDCOM file and return the reader object."""
    return GedcomReader(str(filepath))


def extract_xref(xref_id: str | None) -> str | None:
    """Strip the @ delimiters from a GEDCOM xref like '@I_347421849@'."""
    if not xref_id:
        return None
    return xref_id.strip("@") or None


def extract_name_parts(indi) -> tuple[str, str]:
    """Extract given name and surname from an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return ("", "")

    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_rec.value, tuple):
        given, surname, _ = name_rec.value
        return (given or "", surname or "")

    givn = name_rec.sub_tag("GIVN")
    surn = name_rec.sub_tag("SURN")
    if givn or surn:
        return (givn.value if givn else "", surn.value if surn else "")

    # Fallback: string format "Given /Surname/"
    given, _, rest = str(name_rec.value).partition("/")
    return (given.strip(), rest.split("/")[0].strip())


def extract_event_date(indi, tag: str) -> str | None:
    """Extract an event date (BIRT, DEAT, ...) as an ISO string when parsable."""
    event = indi.sub_tag(tag)
    if event is None:
        return None
    date_rec = event.sub_tag("DATE")
    if date_rec is None or not date_rec.value:
        return None
    # ged4py may return DateValue objects
    raw = str(date_rec.value)
    parsed = parse_date(raw)
    return parsed.isoformat() if parsed else raw


def extract_gender(indi) -> str:
    sex_rec = indi.sub_tag("SEX")
    sex = sex_rec.value if sex_rec else None
    return {"M": "male", "F": "female"}.get(sex, "other")


def normalize_data(reader: GedcomReader) -> list[Person]:
    """
    Build person records with spouse, parent and children links from parsed GEDCOM data.

    A person carries a single spouse link, taken from the first family that pairs them.
    """
    people: dict[str, Person] = {}

    for rec in reader.records0("INDI"):
        indi_id = extract_xref(rec.xref_id)
        if indi_id is None:
            continue
        given, surname = extract_name_parts(rec)
        people[indi_id] = Person(
            id=indi_id,
            first_name=given,
            last_name=surname,
            birth_date=extract_event_date(rec, "BIRT"),
            death_date=extract_event_date(rec, "DEAT"),
            gender=extract_gender(rec),
        )

    for rec in reader.records0("FAM"):
        husb = rec.sub_tag("HUSB")
        wife = rec.sub_tag("WIFE")
        partners = [
            extract_xref(tag.xref_id) for tag in (husb, wife) if tag is not None
        ]
        partners = [pid for pid in partners if pid in people]

        if len(partners) == 2:
            a, b = (people[pid] for pid in partners)
            if a.spouse_id is None and b.spouse_id is None:
                a.spouse_id = b.id
                b.spouse_id = a.id

        for child_tag in rec.sub_tags("CHIL"):
            child_id = extract_xref(child_tag.xref_id)
            if child_id not in people:
                continue
            child = people[child_id]
            for parent_id in partners:
                if parent_id not in child.parent_ids:
                    child.parent_ids.append(parent_id)
                if child_id not in people[parent_id].children_ids:
                    people[parent_id].children_ids.append(child_id)

    return list(people.values())
