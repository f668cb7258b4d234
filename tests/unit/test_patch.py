from __future__ import annotations

import pytest

from tablelinks.model.plan import ReplacementPlan
from tablelinks.parser.table_locator import locate_table_body
from tablelinks.parser.tokenizer import tokenize
from tablelinks.transform.patch import apply_plan, splice

DOC = (
    "<html><!-- keep   me -->\r\n<table><tbody>\r\n"
    "<tr ><td>A</td><TD  class='x'>old</TD>  <td>z</td></tr>\r\n"
    "<tr><td>B</td><td>b1</td><td>b2</td></tr>\r\n"
    "</tbody></table>  trailer\r\n</html>"
)


def test_splice_replaces_only_listed_spans() -> None:
    assert splice("aXbYc", [(1, 2), (3, 4)], {1: "yy"}) == "aXbyyc"
    assert splice("abc", [(0, 1)], {}) == "abc"


def test_splice_rejects_overlap() -> None:
    with pytest.raises(ValueError, match="overlaps"):
        splice("abcdef", [(0, 3), (2, 4)], {0: "x"})


def test_apply_plan_preserves_everything_else() -> None:
    span = locate_table_body(DOC)
    rows = tokenize(span.inner)
    plan = ReplacementPlan.from_dict({0: {1: "new"}, 1: {2: "B2"}})

    out = apply_plan(DOC, span, rows, plan)

    assert out == DOC.replace(">old<", ">new<").replace(">b2<", ">B2<")
    assert "<TD  class='x'>new</TD>" in out


def test_empty_plan_returns_same_text() -> None:
    span = locate_table_body(DOC)
    assert apply_plan(DOC, span, tokenize(span.inner), ReplacementPlan()) is DOC


def test_plan_is_read_only() -> None:
    plan = ReplacementPlan.from_dict({0: {1: "x"}, 3: {}})
    assert list(plan) == [(0, 1, "x")]
    assert len(plan) == 1
    assert 3 not in plan.rows
    with pytest.raises(TypeError):
        plan.rows[0][1] = "y"  # type: ignore[index]
