import pytest

from database import (
    create_database,
    create_person,
    delete_person,
    fetch_person,
    load_people,
    store_people,
    update_person,
)
from models import Person


@pytest.fixture
def conn(tmp_path):
    conn = create_database(tmp_path / "tree.db")
    store_people(
        conn,
        [
            Person(id="A", first_name="Ann", spouse_id="B", children_ids=["C"]),
            Person(id="B", first_name="Bob", spouse_id="A"),
            Person(id="C", first_name="Cid", birth_date="1980-01-01", parent_ids=["A", "B"]),
        ],
    )
    yield conn
    conn.close()


def test_load_rebuilds_relations(conn):
    people = {p.id: p for p in load_people(conn)}

    assert people["C"].parent_ids == ["A", "B"]
    assert people["A"].children_ids == ["C"]
    assert people["B"].children_ids == ["C"]
    assert people["A"].spouse_id == "B"
    assert people["C"].birth_date == "1980-01-01"


def test_create_person_mirrors_spouse(conn):
    create_person(conn, Person(id="D", first_name="Dee", spouse_id="C"))

    assert fetch_person(conn, "C").spouse_id == "D"
    assert fetch_person(conn, "D").spouse_id == "C"


def test_create_person_takes_partner_from_previous_marriage(conn):
    create_person(conn, Person(id="D", first_name="Dee", spouse_id="B"))

    people = {p.id: p for p in load_people(conn)}
    assert people["B"].spouse_id == "D"
    assert people["D"].spouse_id == "B"
    assert people["A"].spouse_id is None


def test_update_person_mirrors_new_spouse(conn):
    cid = fetch_person(conn, "C")
    cid.spouse_id = "A"

    update_person(conn, cid)

    people = {p.id: p for p in load_people(conn)}
    assert people["A"].spouse_id == "C"
    assert people["C"].spouse_id == "A"
    assert people["B"].spouse_id is None


def test_update_person_clearing_spouse_clears_partner(conn):
    ann = fetch_person(conn, "A")
    ann.spouse_id = None

    update_person(conn, ann)

    assert fetch_person(conn, "A").spouse_id is None
    assert fetch_person(conn, "B").spouse_id is None


def test_update_person_rebuilds_parents(conn):
    cid = fetch_person(conn, "C")
    cid.first_name = "Cyd"
    cid.parent_ids = ["A"]

    update_person(conn, cid)

    assert fetch_person(conn, "C").first_name == "Cyd"
    assert fetch_person(conn, "C").parent_ids == ["A"]
    assert fetch_person(conn, "B").children_ids == []


def test_delete_person_clears_references(conn):
    delete_person(conn, "A")

    people = {p.id: p for p in load_people(conn)}
    assert set(people) == {"B", "C"}
    assert people["B"].spouse_id is None
    assert people["C"].parent_ids == ["B"]


def test_unknown_ids_raise(conn):
    with pytest.raises(KeyError):
        fetch_person(conn, "nobody")
    with pytest.raises(KeyError):
        delete_person(conn, "nobody")
    with pytest.raises(KeyError):
        update_person(conn, Person(id="nobody"))
