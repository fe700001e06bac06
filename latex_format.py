# latex_format.py
import math
from dataclasses import dataclass

from lp_settings import SYMBOLS

SPACE = "\\space"


@dataclass(frozen=True)
class FormatOptions:
    """
    Presentation flags for numbers and fractions.

    starting_sign: add the leading "+" for positive numbers. Default False.
    show_ones: display the 1 when the value is 1 or -1. Default False.
    no_space: remove the leading padding. Default False.
    """
    starting_sign: bool = False
    show_ones: bool = False
    no_space: bool = False


DEFAULT_OPTIONS = FormatOptions()
# numerator and denominator of a fraction are never padded nor elided
FRACTION_PART_OPTIONS = FormatOptions(show_ones=True, no_space=True)


def _to_number(value):
    """Read a number the lenient way: blank text is 0, anything unreadable is NaN."""
    if value is None:
        return math.nan
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _number_text(value):
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_number(value, options=DEFAULT_OPTIONS):
    """
    Transform a number into its LaTeX representation.

    A missing or unreadable value is shown as "?". Unless ``show_ones`` is
    set, a magnitude of 1 is replaced by padding so it can prefix a variable.
    """
    value = _to_number(value)
    empty = "" if options.no_space else SPACE * 4
    prefix = "+" + SPACE if options.starting_sign else empty

    if math.isnan(value):
        return prefix + "?"
    if value < 0:
        return "-" + SPACE + (_number_text(-value) if -value != 1 or options.show_ones else SPACE * 2 + " ")
    return prefix + (_number_text(value) if value != 1 or options.show_ones else SPACE * 2 + " ")


def format_fraction(fraction, options=DEFAULT_OPTIONS):
    """
    Format a fraction string, either "A" or "A / B", into LaTeX.

    Parameters:
    -----------
    fraction : str or None
        The value as sent by the solver. None gives an empty string.
    options : FormatOptions
        Only used when the value is a plain number; the parts of a
        structured fraction are always formatted without padding and with ones.
    """
    if fraction is None:
        return ""
    fraction = str(fraction)
    if "/" not in fraction:
        return format_number(fraction, options)

    parts = fraction.split("/")
    numerator = format_number(parts[0], FRACTION_PART_OPTIONS)
    denominator = format_number(parts[1], FRACTION_PART_OPTIONS)
    return f"\\frac{{{numerator}}}{{{denominator}}}"


def plain_fraction(fraction):
    """Fraction string without LaTeX, e.g. "-8 / 3" -> "-8/3"."""
    if fraction is None:
        return ""
    return str(fraction).replace(" ", "")


def format_variable_label(label, symbols=SYMBOLS):
    """Format a raw solver label like "x0" or "y5" into "x_{1}" or "y_{6}"."""
    if not label:
        return ""
    kind = label[0]
    if kind == "x":
        kind = symbols['variable']
    elif kind == "y":
        kind = symbols['artificial']
    try:
        index = int(label[1:]) + 1
    except ValueError:
        return label
    return f"{kind}_{{{index}}}"


def plain_variable_label(label):
    """Same as format_variable_label, without LaTeX: "x0" -> "x1"."""
    if not label:
        return ""
    try:
        return f"{label[0]}{int(label[1:]) + 1}"
    except ValueError:
        return label


def get_sign(to_maximise):
    """LaTeX relation used by the constraints for the current goal."""
    return "\\leqslant" if to_maximise else "\\geqslant"


def _index_set(count):
    return ", & ".join(str(i) for i in range(1, count + 1))


def format_lp_problem(program, symbols=SYMBOLS):
    """
    Format a LinearProgram in LaTeX.

    The program is assumed valid (it can only be built through validation).
    Values are displayed as stored, so constraint coefficients show the
    solver's sign convention.
    """
    obj_name = symbols['objective']
    var_name = symbols['variable']
    coef_name = symbols['coefficient']
    n, m = program.n, program.m

    latex = f"P = \\begin{{cases}} \\text{{{'max' if program.to_maximise else 'min'}}} \\space {obj_name}(x) = & "

    # Objective Function
    # do not add a + sign until we are after a non zero value
    all_zero = True
    for i in range(1, n + 1):
        coeff = program.objective[i]
        # or show it if it's the last one and all the previous were 0
        if coeff != 0 or (all_zero and i == n):
            latex += f"{format_number(coeff, FormatOptions(starting_sign=not all_zero))}{coef_name}_{{{i}}}"
            all_zero = False
        if i == n:
            constant = format_number(program.objective[0], FormatOptions(show_ones=True, starting_sign=True))
            latex += f" & {constant}\\\\"
        else:
            latex += " & "

    # Constraints
    sign = get_sign(program.to_maximise)
    for i in range(m):
        latex += " & "
        all_zero = True
        for j in range(n):
            coeff = program.coefs[i][j]
            if coeff != 0 or (all_zero and j == n - 1):
                latex += f"{format_number(coeff, FormatOptions(starting_sign=not all_zero))}{var_name}_{{{j + 1}}} & "
                all_zero = False
            else:
                latex += " & "
        constant = format_number(program.constants[i], FormatOptions(show_ones=True, no_space=True))
        latex += f"{sign} {constant}\\\\"

    # Non-negativity
    if var_name != coef_name:
        latex += f"{coef_name}_{{i}}, i \\in & \\{{{_index_set(n)}\\}} & \\geqslant 0\\\\"
    latex += f"{var_name}_{{i}}, i \\in & \\{{{_index_set(n)}\\}} & \\geqslant 0"
    latex += "\\\\\\end{cases}"
    return latex
