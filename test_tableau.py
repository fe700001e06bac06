# test_tableau.py

import warnings

import pandas as pd
import pytest
import sys
import os

# Add the directory containing tableau.py to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from lp_model import SimplexResponse, SimplexStep
from lp_settings import create_example_response
from tableau import (
    RenderInconsistencyWarning,
    StepKind,
    TableauRenderer,
    basic_id_to_column,
    column_label,
    pivot_location,
    render,
    resolve_basic_column,
    resolve_row_label,
    summarize_feasibility,
)


@pytest.fixture
def example_renderer():
    """Renderer over the recorded 5 steps trace."""
    return TableauRenderer(create_example_response())


def two_phase_response():
    """Phase 1 start, one phase 1 pivot (the auxiliary variable leaves), phase 2 start, final tableau."""
    return {
        "feasibility": 0,
        "optimum": "2",
        "values": ["2", "0"],
        "labels": ["RHS", "L", "x0", "x1", "y0"],
        "steps": [
            {"in": None, "out": None, "twophase": True, "dualcut": False,
             "table": [["0", "0", "-1", "-1", "0"],
                       ["-2", "1", "-1", "-1", "0"],
                       ["2", "0", "1", "1", "1"]],
             "basicId": [0, 3]},
            {"in": 2, "out": 1, "twophase": True, "dualcut": False,
             "table": [["0", "0", "0", "0", "0"],
                       ["0", "1", "0", "1", "-1"],
                       ["2", "0", "1", "0", "0"]],
             "basicId": [0, 1]},
            {"in": None, "out": None, "twophase": False, "dualcut": False,
             "table": [["2", "0", "1", "0"],
                       ["2", "1", "0", "1"]],
             "basicId": [0]},
            {"in": None, "out": None, "twophase": False, "dualcut": False,
             "table": [["2", "0", "1", "0"],
                       ["2", "1", "0", "1"]],
             "basicId": [0]},
        ],
    }


# --- Basic variable resolution ---

def test_resolve_basic_column():
    table = [["0", "0", "3", "0"],
             ["4", "1", "2", "0"],
             ["6", "0", "1", "1"]]
    assert resolve_basic_column(table, 1) == 1
    assert resolve_basic_column(table, 2) == 3


def test_resolve_basic_column_compares_exact_fractions():
    table = [["1 / 2", "0 / 5"],
             ["7", "3 / 3"]]
    assert resolve_basic_column(table, 1) == 1


def test_resolve_basic_column_ignores_rhs_and_missing_rows():
    table = [["0", "2"],
             ["1", "2"]]
    assert resolve_basic_column(table, 1) is None
    assert resolve_basic_column(table, 5) is None


def test_resolve_row_label_placeholder_with_warning():
    table = [["0", "2"],
             ["1", "2"]]
    labels = ["RHS", "x1"]
    assert resolve_row_label(table, 0, labels) == "RHS"
    with pytest.warns(RenderInconsistencyWarning):
        assert resolve_row_label(table, 1, labels) == ""


# --- Column mapping ---

def test_basic_id_to_column():
    assert basic_id_to_column(0) == 1
    assert basic_id_to_column(4) == 5


def test_column_label_single_phase():
    labels = ["R", "a", "b", "c"]
    assert column_label(0, labels) == "R"
    assert column_label(2, labels) == "b"


def test_column_label_two_phase_shifts_columns():
    labels = ["R", "a", "b", "c"]
    assert column_label(0, labels, twophase=True) == "R"
    assert column_label(1, labels, twophase=True, auxiliary_label="L") == "L"
    assert column_label(2, labels, twophase=True) == "a"
    assert column_label(4, labels, twophase=True) == "c"


@pytest.mark.parametrize("column", [None, -1, 4])
def test_column_label_out_of_range(column):
    with pytest.warns(RenderInconsistencyWarning):
        assert column_label(column, ["R", "a", "b", "c"]) == ""


def test_pivot_location_reads_next_step():
    steps = [SimplexStep(), SimplexStep(in_col=2, out_row=1), SimplexStep()]
    assert pivot_location(steps, 0) == (2, 1)
    assert pivot_location(steps, 1) == (None, None)
    assert pivot_location(steps, 2) == (None, None)


# --- Rendering ---

def test_render_without_steps():
    assert render({"steps": []}) == []
    assert TableauRenderer(SimplexResponse.from_dict(None)).render() == []


def test_render_example(example_renderer):
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        rendered = example_renderer.render()

    assert len(rendered) == 5
    assert all(latex.startswith("\\begin{array} {|c|c|c|c|c|c|c|c|} \\hline & ") for latex in rendered)
    assert all(latex.endswith("\\end{array}") for latex in rendered)

    # the first pivot (x_{2} enters on row 1) is shown on the first tableau
    assert " \\color{RED} x_{2}" in rendered[0]
    assert " \\color{BLUE} y_{1} & " in rendered[0]
    assert "\\color{PURPLE} 3" in rendered[0]
    assert "\\color" not in rendered[-1]


def test_render_is_deterministic(example_renderer):
    assert example_renderer.render() == TableauRenderer(create_example_response()).render()
    assert render(create_example_response()) == example_renderer.render()


def test_render_step_cells_are_fractions(example_renderer):
    latex = example_renderer.render_step(example_renderer.steps[1], 1)
    assert "\\frac{-\\space40}{3}" in latex
    assert "\\frac{8}{3}" in latex


def test_example_titles(example_renderer):
    titles = [example_renderer.step_title(step, i) for i, step in enumerate(example_renderer.steps)]
    assert titles[0] == "\\text{First tableau}"
    assert titles[1] == "\\text{Step 1: entering variable: }x_{2}\\text{, leaving variable: }y_{1}"
    assert titles[2] == "\\text{Step 2: entering variable: }x_{3}\\text{, leaving variable: }y_{2}"
    assert titles[3] == "\\text{Step 3: entering variable: }x_{1}\\text{, leaving variable: }y_{3}"
    assert titles[4] == "\\text{Final tableau}"


def test_plain_titles(example_renderer):
    step = example_renderer.steps[1]
    assert example_renderer.step_title(step, 1, plain=True) == \
        "Step 1: entering variable: x2, leaving variable: y1"


def test_final_row_labels(example_renderer):
    final = example_renderer.steps[-1]
    labels = [example_renderer.row_label(final, i) for i in range(final.height)]
    assert labels == ["\\text{RHS}", "x_{2}", "x_{3}", "x_{1}"]


def test_two_phase_titles():
    renderer = TableauRenderer(two_phase_response())
    assert renderer.has_phases
    titles = [renderer.step_title(step, i, plain=True) for i, step in enumerate(renderer.steps)]
    assert titles == [
        "Phase 1: First tableau",
        "Step 1: entering variable: x1, leaving variable: L",
        "Phase 2: First tableau",
        "Final tableau",
    ]
    assert renderer.step_title(renderer.steps[1], 1).endswith("\\text{, leaving variable: }\\lambda")


def test_two_phase_labels():
    renderer = TableauRenderer(two_phase_response())
    first = renderer.steps[0]
    assert renderer.row_label(first, 1) == "\\lambda"
    assert renderer.row_label(first, 2) == "y_{1}"
    assert renderer.row_label(first, 2, plain=True) == "y1"

    headers, _ = renderer.step_rows(first, 0)
    assert headers == ["Basis", "RHS", "L", "x1*", "x2", "y1"]

    # phase 2 tables drop the auxiliary column
    headers, rows = renderer.step_rows(renderer.steps[2], 2)
    assert headers == ["Basis", "RHS", "x1", "x2", "y1"]
    assert rows[1][0] == "x1"


def test_two_phase_render_has_auxiliary_column():
    rendered = TableauRenderer(two_phase_response()).render()
    assert "\\lambda & " in rendered[0]
    assert " \\color{RED} x_{1}" in rendered[0]


def test_dual_cut_step_starts_a_phase():
    steps = [
        {"in": None, "out": None, "table": [["0", "1"], ["1", "1"]], "basicId": [0]},
        {"in": None, "out": None, "dualcut": True, "table": [["0", "1"], ["1", "1"]], "basicId": [0]},
        {"in": None, "out": None, "table": [["0", "1"], ["1", "1"]], "basicId": [0]},
    ]
    renderer = TableauRenderer({"steps": steps, "labels": ["RHS", "x0"]})
    assert [renderer.step_kind(i) for i in range(3)] == [
        StepKind.FIRST_TABLEAU, StepKind.PHASE_ONE_START, StepKind.FINAL_TABLEAU]


def test_unknown_step_warns():
    steps = [
        {"in": 1, "out": None, "table": [["0", "0"], ["1", "1"]], "basicId": [0]},
        {"in": None, "out": None, "table": [["0", "0"], ["1", "1"]], "basicId": [0]},
    ]
    renderer = TableauRenderer({"steps": steps, "labels": ["RHS", "x0"]})
    assert renderer.step_kind(0) == StepKind.UNKNOWN
    with pytest.warns(RenderInconsistencyWarning):
        assert renderer.step_title(renderer.steps[0], 0) == "\\text{Unknown step}"


def test_pivot_on_first_step_has_no_leaving_variable():
    steps = [{"in": 1, "out": 1, "table": [["0", "0"], ["1", "1"]], "basicId": [0]}]
    renderer = TableauRenderer({"steps": steps, "labels": ["RHS", "x0"]})
    with pytest.warns(RenderInconsistencyWarning):
        title = renderer.step_title(renderer.steps[0], 0, plain=True)
    assert title == "Step 0: entering variable: x1, leaving variable: "


def test_leaving_row_outside_previous_basis():
    steps = [
        {"in": None, "out": None, "table": [["0", "0"], ["1", "1"]], "basicId": [0]},
        {"in": 1, "out": 0, "table": [["0", "0"], ["1", "1"]], "basicId": [0]},
    ]
    renderer = TableauRenderer({"steps": steps, "labels": ["RHS", "x0"]})
    with pytest.warns(RenderInconsistencyWarning):
        assert renderer.leaving_label(renderer.steps[1], 1) == ""


def test_empty_table_renders_empty_string():
    renderer = TableauRenderer({"steps": [{"in": None, "out": None}]})
    with pytest.warns(RenderInconsistencyWarning):
        assert renderer.render() == [""]


def test_ragged_table_still_renders():
    steps = [{"in": None, "out": None, "table": [["0", "1", "0"], ["1", "1"]], "basicId": [0]}]
    renderer = TableauRenderer({"steps": steps, "labels": ["RHS", "x0", "x1"]})
    with pytest.warns(RenderInconsistencyWarning):
        rendered = renderer.render()
    assert rendered[0].startswith("\\begin{array} {|c|c|c|c|}")
    assert rendered[0].endswith("\\end{array}")


# --- Outcome ---

def test_summarize_feasible(example_renderer):
    summary = example_renderer.summarize_feasibility()
    assert summary.startswith("\\text{The optimum is } z* = \\frac{765}{41} \\text{ with }")
    assert "c_{1}* = \\frac{89}{41} \\space " in summary
    assert "c_{3}* = \\frac{62}{41} \\space " in summary
    assert summary.endswith(" .")


@pytest.mark.parametrize("code, expected", [
    (1, "\\text{There is no solution.}"),
    (2, "\\text{The solution is unbounded.}"),
    (3, "\\text{The maximum number of iterations has been reached.}"),
    (-1, "\\color{red}{\\text{Unknown error}}"),
    (42, "\\color{red}{\\text{Unknown error}}"),
])
def test_summarize_other_outcomes(code, expected):
    assert summarize_feasibility({"feasibility": code}) == expected


def test_summarize_timeout():
    assert summarize_feasibility(None) == "\\color{red}{\\text{Unknown error}}"


# --- Text output ---

def test_step_dataframe(example_renderer):
    frame = example_renderer.step_dataframe(example_renderer.steps[0], 0)
    assert isinstance(frame, pd.DataFrame)
    assert list(frame.columns) == ["Basis", "RHS", "x1", "x2*", "x3", "y1", "y2", "y3"]
    assert frame.iloc[1, 0] == "y1*"
    assert frame.iloc[1, 3] == "[3]"
    assert frame.iloc[0, 0] == "RHS"


def test_render_text(example_renderer):
    texts = example_renderer.render_text()
    assert len(texts) == 5
    assert texts[0].startswith("First tableau\n")
    assert "[3]" in texts[0]
    assert texts[3].startswith("Step 3: entering variable: x1, leaving variable: y3\n")
    assert "-765/41" in texts[4]


def test_print_steps(example_renderer, capsys):
    example_renderer.print_steps()
    captured = capsys.readouterr()
    assert "Final tableau" in captured.out
    assert "The optimum is z* = 765/41 with c1* = 89/41, c2* = 50/41, c3* = 62/41." in captured.out


def test_feasibility_text_for_failures():
    assert TableauRenderer({"feasibility": 2}).feasibility_text() == "The solution is unbounded."
    assert TableauRenderer({"feasibility": 7}).feasibility_text() == "Unknown error"


# --- Run the tests ---
if __name__ == '__main__':
    pytest.main([__file__, '-v'])
