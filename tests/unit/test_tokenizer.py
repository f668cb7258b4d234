from __future__ import annotations

from tablelinks.parser.tokenizer import split_cells, split_rows, tokenize


def test_split_rows_keeps_offsets() -> None:
    inner = '\n  <tr class="odd"><td>1</td></tr>\n  <TR><td>2</td></TR >\n'
    rows = split_rows(inner)

    assert [r.index for r in rows] == [0, 1]
    for row in rows:
        assert inner[row.start : row.end] == row.text
    assert rows[0].text.startswith('<tr class="odd">')
    assert rows[1].text.endswith("</TR >")


def test_split_cells_captures_tag_attrs_and_inner() -> None:
    row = '<tr><th scope="row">A-1</th>\n<td class="pdf" data-x=\'1\'><a href="a.pdf">a.pdf</a></td><TD></td></tr>'
    cells = split_cells(row)

    assert [c.tag for c in cells] == ["th", "td", "td"]
    assert cells[0].attrs == ' scope="row"'
    assert cells[0].inner == "A-1"
    assert cells[1].attrs == " class=\"pdf\" data-x='1'"
    assert cells[1].inner == '<a href="a.pdf">a.pdf</a>'
    assert cells[2].open_tag == "<TD>"
    assert cells[2].close_tag == "</td>"
    for cell in cells:
        assert row[cell.start : cell.end] == cell.open_tag + cell.inner + cell.close_tag


def test_closing_tag_must_match_opener() -> None:
    # </th> does not close a <td>; the td runs to its own </td>
    cells = split_cells("<tr><td>a</th>b</td></tr>")
    assert len(cells) == 1
    assert cells[0].inner == "a</th>b"


def test_thead_and_tbody_are_not_cells() -> None:
    assert split_cells("<thead><tr></tr></thead>") == []


def test_with_inner_replays_wrapper() -> None:
    cell = split_cells('<tr><td class="x">old</td></tr>')[0]
    assert cell.with_inner("new") == '<td class="x">new</td>'


def test_tokenize_includes_rows_without_cells() -> None:
    rows = tokenize("<tr><td>1</td><td>2</td></tr><tr></tr>")
    assert len(rows) == 2
    assert len(rows[0][1]) == 2
    assert rows[1][1] == []
