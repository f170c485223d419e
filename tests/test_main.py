import json

from main import main


def write_people(path):
    path.write_text(
        json.dumps(
            [
                {"id": "A", "firstName": "Ann", "spouseId": "B", "birthDate": "1950-01-01", "childrenIds": ["C"]},
                {"id": "B", "firstName": "Bob", "spouseId": "A", "birthDate": "1949-01-01", "childrenIds": ["C"]},
                {"id": "C", "firstName": "Cid", "birthDate": "1980-01-01", "parentIds": ["A", "B"]},
                {"id": "Z", "firstName": "Zoe"},
            ]
        )
    )


def test_json_to_positions(tmp_path):
    source = tmp_path / "people.json"
    output = tmp_path / "positions.json"
    write_people(source)

    assert main([str(source), "-o", str(output)]) == 0

    positions = json.loads(output.read_text())
    assert set(positions) == {"A", "B", "C", "Z"}
    assert positions["C"]["level"] == 1
    assert positions["A"]["name"] == "Ann"


def test_focus_and_db_seed(tmp_path):
    source = tmp_path / "people.json"
    output = tmp_path / "positions.json"
    db = tmp_path / "tree.db"
    write_people(source)

    assert main([str(source), "-o", str(output), "--db", str(db), "--focus", "C", "--radius", "1"]) == 0
    assert set(json.loads(output.read_text())) == {"A", "B", "C"}

    # The seeded store works as an input too
    assert main([str(db), "-o", str(output), "--no-validate"]) == 0
    assert set(json.loads(output.read_text())) == {"A", "B", "C", "Z"}


def test_dot_output(tmp_path):
    source = tmp_path / "people.json"
    output = tmp_path / "tree.dot"
    write_people(source)

    assert main([str(source), "-o", str(output)]) == 0
    assert output.exists()


def test_errors_exit_nonzero(tmp_path, capsys):
    source = tmp_path / "people.txt"
    source.write_text("")

    assert main([str(source)]) == 1
    assert "Unsupported input file" in capsys.readouterr().err

    people = tmp_path / "people.json"
    write_people(people)
    assert main([str(people), "--focus", "nobody", "-o", str(tmp_path / "x.json")]) == 1


def test_stats_prints_counts(tmp_path, capsys):
    source = tmp_path / "people.json"
    write_people(source)

    assert main([str(source), "--stats"]) == 0

    out = capsys.readouterr().out
    assert "total: 4" in out
    assert "married: 2" in out
    assert "with children: 2" in out
    assert "Computing layout" not in out


def test_search_lists_matches(tmp_path, capsys):
    source = tmp_path / "people.json"
    write_people(source)

    assert main([str(source), "--search", "ANN"]) == 0

    out = capsys.readouterr().out
    assert "1 people match 'ANN'" in out
    assert "A: Ann" in out
    assert "born Jan 1, 1950" in out


def test_focus_by_unique_name(tmp_path):
    source = tmp_path / "people.json"
    output = tmp_path / "positions.json"
    write_people(source)

    assert main([str(source), "-o", str(output), "--focus", "cid", "--radius", "1"]) == 0
    assert set(json.loads(output.read_text())) == {"A", "B", "C"}


def test_ambiguous_name_is_an_error(tmp_path, capsys):
    source = tmp_path / "people.json"
    write_people(source)

    # "o" matches Bob and Zoe
    assert main([str(source), "--focus", "o", "-o", str(tmp_path / "x.json")]) == 1
    assert "2 people match" in capsys.readouterr().err


def test_highlight_relatives_in_image(tmp_path, capsys):
    source = tmp_path / "people.json"
    output = tmp_path / "tree.png"
    write_people(source)

    assert main([str(source), "-o", str(output), "--highlight", "Ann"]) == 0

    assert output.exists()
    assert "Highlighting A and 2 relatives" in capsys.readouterr().out
