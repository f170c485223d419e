"""SQLite person store backing the family tree."""

from pathlib import Path
import sqlite3

from models import Person

PERSON_COLUMNS = (
    "id",
    "first_name",
    "last_name",
    "birth_date",
    "death_date",
    "gender",
    "photo",
    "bio",
    "occupation",
    "location",
    "spouse_id",
)


def create_database(db_path: Path | str) -> sqlite3.Connection:
    """Create SQLite database with person and parent_child tables."""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS person (
            id TEXT PRIMARY KEY,
            first_name TEXT NOT NULL DEFAULT '',
            last_name TEXT NOT NULL DEFAULT '',
            birth_date TEXT,
            death_date TEXT,
            gender TEXT NOT NULL DEFAULT 'other',
            photo TEXT,
            bio TEXT,
            occupation TEXT,
            location TEXT,
            spouse_id TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS parent_child (
            parent_id TEXT NOT NULL,
            child_id TEXT NOT NULL,
            PRIMARY KEY (parent_id, child_id)
        )
    """)

    conn.commit()
    return conn


def _person_row(p: Person) -> tuple:
    return tuple(getattr(p, column) for column in PERSON_COLUMNS)


def _insert_parent_links(cursor: sqlite3.Cursor, p: Person):
    cursor.executemany(
        "INSERT OR IGNORE INTO parent_child (parent_id, child_id) VALUES (?, ?)",
        [(parent_id, p.id) for parent_id in p.parent_ids],
    )


def store_people(conn: sqlite3.Connection, people: list[Person]):
    """Insert or replace people and their parent links (seeding from an import)."""
    cursor = conn.cursor()
    placeholders = ", ".join("?" for _ in PERSON_COLUMNS)
    cursor.executemany(
        f"INSERT OR REPLACE INTO person ({', '.join(PERSON_COLUMNS)}) VALUES ({placeholders})",
        [_person_row(p) for p in people],
    )
    for p in people:
        _insert_parent_links(cursor, p)
        # Children recorded only on the parent side still become links
        cursor.executemany(
            "INSERT OR IGNORE INTO parent_child (parent_id, child_id) VALUES (?, ?)",
            [(p.id, child_id) for child_id in p.children_ids],
        )
    conn.commit()


def load_people(conn: sqlite3.Connection) -> list[Person]:
    """Load every person, with parent and children lists rebuilt from parent_child."""
    cursor = conn.cursor()

    parents_of: dict[str, list[str]] = {}
    children_of: dict[str, list[str]] = {}
    cursor.execute("SELECT parent_id, child_id FROM parent_child ORDER BY rowid")
    for parent_id, child_id in cursor.fetchall():
        parents_of.setdefault(child_id, []).append(parent_id)
        children_of.setdefault(parent_id, []).append(child_id)

    cursor.execute(f"SELECT {', '.join(PERSON_COLUMNS)} FROM person ORDER BY rowid")
    people = []
    for row in cursor.fetchall():
        p = Person(**dict(zip(PERSON_COLUMNS, row)))
        p.parent_ids = parents_of.get(p.id, [])
        p.children_ids = children_of.get(p.id, [])
        people.append(p)
    return people


def fetch_person(conn: sqlite3.Connection, person_id: str) -> Person:
    """Load one person by id. Raises KeyError if absent."""
    for p in load_people(conn):
        if p.id == person_id:
            return p
    raise KeyError(person_id)


def _require(cursor: sqlite3.Cursor, person_id: str):
    cursor.execute("SELECT 1 FROM person WHERE id = ?", (person_id,))
    if cursor.fetchone() is None:
        raise KeyError(person_id)


def _mirror_spouse(cursor: sqlite3.Cursor, person: Person):
    """Point the spouse back at the person and drop any other marriage either one had."""
    if person.spouse_id:
        pair = (person.id, person.spouse_id)
        cursor.execute(
            "UPDATE person SET spouse_id = NULL WHERE spouse_id IN (?, ?) AND id NOT IN (?, ?)", pair + pair
        )
        cursor.execute("UPDATE person SET spouse_id = ? WHERE id = ?", (person.id, person.spouse_id))
    else:
        cursor.execute("UPDATE person SET spouse_id = NULL WHERE spouse_id = ?", (person.id,))


def create_person(conn: sqlite3.Connection, person: Person) -> Person:
    """Insert a new person with links to their parents and mirror the spouse link."""
    cursor = conn.cursor()
    placeholders = ", ".join("?" for _ in PERSON_COLUMNS)
    cursor.execute(
        f"INSERT INTO person ({', '.join(PERSON_COLUMNS)}) VALUES ({placeholders})",
        _person_row(person),
    )
    _insert_parent_links(cursor, person)
    _mirror_spouse(cursor, person)
    conn.commit()
    return person


def update_person(conn: sqlite3.Connection, person: Person):
    """Replace a person's fields, rebuild their parent links and mirror the spouse link."""
    cursor = conn.cursor()
    _require(cursor, person.id)

    assignments = ", ".join(f"{column} = ?" for column in PERSON_COLUMNS[1:])
    cursor.execute(
        f"UPDATE person SET {assignments} WHERE id = ?",
        _person_row(person)[1:] + (person.id,),
    )
    cursor.execute("DELETE FROM parent_child WHERE child_id = ?", (person.id,))
    _insert_parent_links(cursor, person)
    _mirror_spouse(cursor, person)
    conn.commit()


def delete_person(conn: sqlite3.Connection, person_id: str):
    """Delete a person along with spouse references and parent/child links to them."""
    cursor = conn.cursor()
    _require(cursor, person_id)

    cursor.execute("UPDATE person SET spouse_id = NULL WHERE spouse_id = ?", (person_id,))
    cursor.execute(
        "DELETE FROM parent_child WHERE parent_id = ? OR child_id = ?", (person_id, person_id)
    )
    cursor.execute("DELETE FROM person WHERE id = ?", (person_id,))
    conn.commit()
