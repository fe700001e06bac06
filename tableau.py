import warnings
from enum import Enum

import numpy as np
import pandas as pd
from tabulate import tabulate

from latex_format import (
    FormatOptions,
    format_fraction,
    format_variable_label,
    plain_fraction,
    plain_variable_label,
)
from lp_model import Feasibility, SimplexResponse, SimplexStep
from lp_settings import LAMBDA_LABEL, RHS_LABEL, SYMBOLS, create_example_response


class RenderInconsistencyWarning(UserWarning):
    """Issued when part of a solver trace cannot be interpreted. Rendering goes on with a placeholder."""
    pass


# Label used when a column or row cannot be identified
PLACEHOLDER = ""
PLAIN_AUXILIARY = "L"
CELL_OPTIONS = FormatOptions(show_ones=True, no_space=True)


class StepKind(Enum):
    PHASE_ONE_START = "phase one start"
    FIRST_TABLEAU = "first tableau"
    FINAL_TABLEAU = "final tableau"
    PIVOT = "pivot"
    UNKNOWN = "unknown"


TITLES = {
    StepKind.PHASE_ONE_START: "Phase 1: First tableau",
    StepKind.FIRST_TABLEAU: "First tableau",
    StepKind.FINAL_TABLEAU: "Final tableau",
    StepKind.UNKNOWN: "Unknown step",
}

FEASIBILITY_TEXT = {
    Feasibility.INFEASIBLE: "There is no solution.",
    Feasibility.UNBOUNDED: "The solution is unbounded.",
    Feasibility.ITERATIONS: "The maximum number of iterations has been reached.",
}
UNKNOWN_TEXT = "Unknown error"


def _warn(message):
    warnings.warn(message, RenderInconsistencyWarning, stacklevel=3)


def _as_matrix(table):
    if isinstance(table, np.ndarray):
        return table
    if isinstance(table, SimplexStep):
        return table.to_matrix()
    return SimplexStep(table=table).to_matrix()


def prepare_labels(raw_labels, symbols=SYMBOLS):
    """Display labels: the RHS label first, then every variable label (auxiliary and RHS entries dropped)."""
    return [symbols['rhs']] + [format_variable_label(label, symbols)
                               for label in raw_labels if label not in (LAMBDA_LABEL, RHS_LABEL)]


def prepare_plain_labels(raw_labels):
    return [RHS_LABEL] + [plain_variable_label(label)
                          for label in raw_labels if label not in (LAMBDA_LABEL, RHS_LABEL)]


def basic_id_to_column(basic_id):
    """Table column of a basicId entry, where basicId 0 is the first column after the RHS."""
    return basic_id + 1


def column_label(column, labels, twophase=False, auxiliary_label=SYMBOLS['auxiliary']):
    """
    Label of a table column.

    Column 0 is the RHS and uses ``labels[0]``. In a two-phase step the
    auxiliary variable occupies column 1 and every later column is shifted
    one place to the right compared to ``labels``.
    """
    if column is None or column < 0:
        _warn(f"Invalid column index {column}.")
        return PLACEHOLDER
    if twophase and column >= 1:
        if column == 1:
            return auxiliary_label
        column -= 1
    if column >= len(labels):
        _warn(f"No label for column {column} ({len(labels)} labels).")
        return PLACEHOLDER
    return labels[column]


def resolve_basic_column(table, row_index):
    """
    Find the column of the basic variable of a tableau row.

    The first column (RHS excluded) holding exactly 1 in that row and exactly
    0 in every other row is returned, None when no column qualifies.
    """
    matrix = _as_matrix(table)
    if not 0 <= row_index < matrix.shape[0]:
        return None
    for k in range(1, matrix.shape[1]):
        if matrix[row_index, k] == 1 and np.all(np.delete(matrix[:, k], row_index) == 0):
            return k
    return None


def resolve_row_label(table, row_index, labels, twophase=False):
    """Label of the basic variable of a row, row 0 being the objective. Empty when it cannot be found."""
    if row_index == 0:
        return labels[0] if labels else PLACEHOLDER
    column = resolve_basic_column(table, row_index)
    if column is None:
        _warn(f"No basic variable found for row {row_index}.")
        return PLACEHOLDER
    return column_label(column, labels, twophase)


def pivot_location(steps, index):
    """
    (column, row) to highlight in the step at ``index``.

    The pivot of a step is the one that produces the next step, so it is read
    from the next step. The last step looks at itself.
    """
    next_step = steps[index + 1] if index + 1 < len(steps) else steps[index]
    return next_step.in_col, next_step.out_row


def classify_step(step, index, count):
    if step.in_col is None and step.out_row is None:
        # either start of a phase, or end of the method
        if index + 1 == count:
            return StepKind.FINAL_TABLEAU
        if step.dualcut or step.twophase:
            return StepKind.PHASE_ONE_START
        return StepKind.FIRST_TABLEAU
    if step.in_col is not None and step.out_row is not None:
        return StepKind.PIVOT
    return StepKind.UNKNOWN


class TableauRenderer:
    """
    Turn a SimplexResponse into displayable steps.

    Every output is computed from the response given at construction, the
    renderer holds no other state and never raises on a malformed trace.
    """

    def __init__(self, response, symbols=SYMBOLS):
        if not isinstance(response, SimplexResponse):
            response = SimplexResponse.from_dict(response)
        self.response = response
        self.symbols = symbols
        self.steps = response.steps
        self.has_phases = any(step.twophase for step in self.steps)
        self.labels = prepare_labels(response.labels, symbols)
        self.plain_labels = prepare_plain_labels(response.labels)

    def column_label(self, column, twophase, plain=False):
        if plain:
            return column_label(column, self.plain_labels, twophase, PLAIN_AUXILIARY)
        return column_label(column, self.labels, twophase, self.symbols['auxiliary'])

    def row_label(self, step, row, plain=False):
        if row == 0:
            return self.plain_labels[0] if plain else self.labels[0]
        if step.twophase and row == 1:
            return PLAIN_AUXILIARY if plain else self.symbols['auxiliary']
        column = resolve_basic_column(step.to_matrix(), row)
        if column is None:
            _warn(f"No basic variable found for row {row}.")
            return PLACEHOLDER
        return self.column_label(column, step.twophase, plain)

    def entering_label(self, step, plain=False):
        return self.column_label(step.in_col, step.twophase, plain)

    def leaving_label(self, step, index, plain=False):
        """Label of the leaving variable, read from the previous step's basicId at ``out - 1``."""
        if index == 0:
            _warn("A pivot step has no previous step.")
            return PLACEHOLDER
        previous = self.steps[index - 1]
        position = step.out_row - 1
        if not 0 <= position < len(previous.basic_id):
            _warn(f"Leaving row {step.out_row} is not a constraint row of the previous step.")
            return PLACEHOLDER
        column = basic_id_to_column(previous.basic_id[position])
        return self.column_label(column, previous.twophase, plain)

    def step_kind(self, index):
        return classify_step(self.steps[index], index, len(self.steps))

    def step_title(self, step, index, plain=False):
        """Describe a step in LaTeX, or in plain text."""
        kind = classify_step(step, index, len(self.steps))
        if kind == StepKind.PIVOT:
            entering = self.entering_label(step, plain)
            leaving = self.leaving_label(step, index, plain)
            if plain:
                return f"Step {index}: entering variable: {entering}, leaving variable: {leaving}"
            return f"\\text{{Step {index}: entering variable: }}{entering}\\text{{, leaving variable: }}{leaving}"

        if kind == StepKind.UNKNOWN:
            _warn(f"Step {index} has only one of its pivot fields set.")
        title = TITLES[kind]
        if kind == StepKind.FIRST_TABLEAU and self.has_phases:
            title = "Phase 2: " + title
        return title if plain else f"\\text{{{title}}}"

    def render_step(self, step, index):
        """Tableau of one step as a LaTeX array, the pivot column/row/cell colored."""
        if not step.table:
            _warn(f"Step {index} has no table.")
            return ""
        if not step.is_consistent():
            _warn(f"Step {index} has an inconsistent table or basicId.")

        # color the pivot that produces the next step
        next_in, next_out = pivot_location(self.steps, index)
        width = step.width

        latex = "\\begin{array} {|" + "c|" * (width + 1) + "} \\hline & "
        # first line is the column names
        for j in range(width):
            if j == next_in:
                latex += " \\color{RED} "
            latex += self.column_label(j, step.twophase)
            if j < width - 1:
                latex += " & "
        latex += "\\\\ \\hline "

        for i, row in enumerate(step.table):
            # first column of the row is the name of the basic variable
            if i == next_out:
                latex += " \\color{BLUE} "
            latex += self.row_label(step, i) + " & "
            for j in range(width):
                if j == next_in and i == next_out:
                    latex += "\\color{PURPLE}"
                else:
                    if j == next_in:
                        latex += " \\color{RED} "
                    if i == next_out:
                        latex += " \\color{BLUE} "
                latex += f" {format_fraction(row[j] if j < len(row) else None, CELL_OPTIONS)}"
                if j < width - 1:
                    latex += " & "
            latex += "\\\\ \\hline "
        latex += "\\end{array}"
        return latex

    def render(self):
        """One LaTeX array per step, in order."""
        return [self.render_step(step, index) for index, step in enumerate(self.steps)]

    def render_titled(self):
        return [(self.step_title(step, index), self.render_step(step, index))
                for index, step in enumerate(self.steps)]

    def step_rows(self, step, index):
        """
        Headers and rows of a step in plain text.

        The entering column and leaving row labels get a "*", the pivot cell
        is put between brackets.
        """
        next_in, next_out = pivot_location(self.steps, index)
        width = step.width

        headers = ["Basis"]
        for j in range(width):
            label = self.column_label(j, step.twophase, plain=True)
            headers.append(label + "*" if j == next_in else label)

        rows = []
        for i, row in enumerate(step.table):
            label = self.row_label(step, i, plain=True)
            row_data = [label + "*" if i == next_out else label]
            for j in range(width):
                value = plain_fraction(row[j] if j < len(row) else None)
                row_data.append(f"[{value}]" if (i, j) == (next_out, next_in) else value)
            rows.append(row_data)
        return headers, rows

    def step_dataframe(self, step, index):
        headers, rows = self.step_rows(step, index)
        return pd.DataFrame(rows, columns=headers)

    def render_text(self):
        """Plain text title and table per step."""
        texts = []
        for index, step in enumerate(self.steps):
            headers, rows = self.step_rows(step, index)
            table = tabulate(rows, headers=headers, colalign=["right"] * len(headers), disable_numparse=True)
            texts.append(f"{self.step_title(step, index, plain=True)}\n{table}")
        return texts

    def summarize_feasibility(self):
        """LaTeX sentence describing the solver outcome."""
        response = self.response
        if response.feasibility == Feasibility.FEASIBLE:
            res = (f"\\text{{The optimum is }} {self.symbols['objective']}* = "
                   f"{format_fraction(response.optimum)} \\text{{ with }}")
            for i, value in enumerate(response.values):
                res += f"{self.symbols['coefficient']}_{{{i + 1}}}* = {format_fraction(value)} \\space "
            res += " ."
            return res
        if response.feasibility in FEASIBILITY_TEXT:
            return f"\\text{{{FEASIBILITY_TEXT[response.feasibility]}}}"
        return f"\\color{{red}}{{\\text{{{UNKNOWN_TEXT}}}}}"

    def feasibility_text(self):
        response = self.response
        if response.feasibility == Feasibility.FEASIBLE:
            values = ", ".join(f"{self.symbols['coefficient']}{i + 1}* = {plain_fraction(v)}"
                               for i, v in enumerate(response.values))
            return f"The optimum is {self.symbols['objective']}* = {plain_fraction(response.optimum)} with {values}."
        return FEASIBILITY_TEXT.get(response.feasibility, UNKNOWN_TEXT)

    def print_steps(self):
        """Print every step as a text table, then the outcome."""
        for text in self.render_text():
            print(f"\n{text}")
        print(f"\n{self.feasibility_text()}")


def render(response, symbols=SYMBOLS):
    """Render every step of a SimplexResponse (or its decoded JSON) as a LaTeX array."""
    return TableauRenderer(response, symbols).render()


def summarize_feasibility(response, symbols=SYMBOLS):
    return TableauRenderer(response, symbols).summarize_feasibility()


# Example Usage
if __name__ == "__main__":
    TableauRenderer(create_example_response()).print_steps()
