import json
import math
import re
import sys

from lp_model import (
    AdvancedOptions,
    InsufficientLinesError,
    InvalidDimensionError,
    InvalidIndexError,
    LinearProgram,
    MalformedNumberError,
    NonNumericContentError,
    NotEnoughValuesError,
    ValidationError,
    ValueOutOfRangeError,
)
from lp_settings import DEFAULTS, EXAMPLE_PROBLEM_TEXT, MAX_ABS_VALUE

# Only digits, dashes, points, spaces and line breaks may appear in the text
DISALLOWED_CHARACTER = re.compile(r"[^0-9\-. \n]")

# Malformed numbers, searched on the flattened text:
#   double dash, double point, dash followed by a space, point next to a space,
#   dash after a digit, leading zero followed by a digit, trailing dash or point
MALFORMED_PATTERN = re.compile(r"--|\.\.|-\s|\s\.|\.\s|\d-|(?:^|[\s-])0\d|[-.]$")

NUMBER_PATTERN = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?")

# 5 because: line M N, line of tight, line of loose, line of constants, line of the objective
MIN_LINES = 5


def _rejection_reason(token):
    """Return why a token is not a valid number, or None if it is one."""
    if not token:
        return "empty value"
    if "--" in token:
        return "double dash"
    if ".." in token:
        return "double decimal point"
    if re.search(r"-\s|\s-", token):
        return "dash next to a space"
    if re.search(r"\.\s|\s\.", token):
        return "decimal point next to a space"
    if DISALLOWED_CHARACTER.search(token) or re.search(r"\s", token):
        return "unexpected character"
    if token[-1] in "-.":
        return "trailing dash or decimal point"
    if "-" in token[1:]:
        return "dash inside a number"
    if token.count(".") > 1:
        return "more than one decimal point"
    if token.lstrip("-").startswith("."):
        return "decimal point without a leading digit"
    if re.match(r"-?0[0-9]", token):
        return "leading zero"
    if not NUMBER_PATTERN.fullmatch(token):
        return "malformed number"
    return None


def lex_number(token, line=None, field=None):
    """
    Decode a single numeric token.

    Commas are accepted as decimal separators. Raises MalformedNumberError
    naming the broken rule when the token is not a plain decimal number.
    """
    token = token.replace(",", ".")
    reason = _rejection_reason(token)
    if reason is None:
        value = float(token)
        if math.isfinite(value):
            return value
        reason = "not a finite number"
    raise MalformedNumberError(f"'{token}' is not a valid number ({reason}).",
                               literal=token, line=line, field=field, reason=reason)


def normalize(raw_text):
    """Unify line breaks, turn decimal commas into points and trim the text."""
    return raw_text.replace("\r\n", "\n").replace("\r", "\n").replace(",", ".").strip()


def check_content(content):
    """
    Coarse pass over the whole normalized text.

    Every character must be a digit, a dash, a point, a space or a line break,
    and the flattened text must not contain any malformed number pattern.
    """
    if not content:
        raise NonNumericContentError("The content does not contain valid numbers (empty content).")

    bad_char = DISALLOWED_CHARACTER.search(content)
    if bad_char:
        raise NonNumericContentError(
            f"The content does not contain valid numbers (unexpected character {bad_char.group()!r}).",
            literal=bad_char.group(), line=content.count("\n", 0, bad_char.start()) + 1)

    # Flattening keeps positions, so a match maps back to its line
    flattened = content.replace("\n", " ")
    malformed = MALFORMED_PATTERN.search(flattened)
    if malformed:
        start = flattened.rfind(" ", 0, malformed.start() + 1) + 1
        line_no = content.count("\n", 0, start) + 1
        end = flattened.find(" ", malformed.end() - 1)
        literal = flattened[start:end if end != -1 else len(flattened)].strip() or malformed.group()
        raise NonNumericContentError(
            f"The content does not contain valid numbers (malformed value '{literal}').",
            literal=literal, line=line_no)


def split_lines(content):
    """Split the text into lines of tokens, repeated spaces are collapsed."""
    return [re.sub(r" +", " ", line).strip().split() for line in content.split("\n")]


def _read_values(tokens, line_no, field, minimum, negate=False):
    if len(tokens) < minimum:
        raise NotEnoughValuesError(
            f"Not enough values for {field} ({minimum} expected, {len(tokens)} found).",
            literal=" ".join(tokens), line=line_no, field=field)

    values = []
    for token in tokens:
        value = lex_number(token, line=line_no, field=field)
        if abs(value) > MAX_ABS_VALUE:
            raise ValueOutOfRangeError(f"{token} is out of range (limit is +/-{MAX_ABS_VALUE}).",
                                       literal=token, line=line_no, field=field)
        # negate because we change from the file standard to the solver standard
        values.append(0.0 - value if negate else value)
    return values


def _read_indices(tokens, line_no, field, minimum):
    indices = []
    for token, value in zip(tokens, _read_values(tokens, line_no, field, minimum)):
        if value <= 0 or not value.is_integer():
            raise InvalidIndexError(f"{token} is not a valid {field} index (positive whole number expected).",
                                    literal=token, line=line_no, field=field)
        indices.append(int(value))
    return indices


def _read_dimension(token, name):
    value = math.floor(lex_number(token, line=1, field=name.lower()))
    if value < 1:
        raise InvalidDimensionError(f"{name} is lower than 1 (got {token}).",
                                    literal=token, line=1, field=name.lower())
    return value


def parse_lines(lines, to_maximise=DEFAULTS['to_maximise'], to_integer=DEFAULTS['to_integer'],
                advanced=None):
    """Structural pass, line by line, over already tokenized lines."""
    if len(lines) < MIN_LINES:
        raise InsufficientLinesError(f"Not enough lines ({MIN_LINES} expected at least, {len(lines)} found).")

    # first line has M and N
    if len(lines[0]) != 2:
        raise InvalidDimensionError("The first line must contain exactly two numbers, M and N.",
                                    literal=" ".join(lines[0]), line=1)
    m = _read_dimension(lines[0][0], "M")
    n = _read_dimension(lines[0][1], "N")

    # we now know how many lines to expect
    if len(lines) < MIN_LINES + m:
        raise InsufficientLinesError(f"Not enough lines ({MIN_LINES + m} expected, {len(lines)} found).")

    tight = _read_indices(lines[1], 2, "tight", m)
    loose = _read_indices(lines[2], 3, "loose", n)
    constants = _read_values(lines[3], 4, "constants", m)[:m]
    coefs = [_read_values(lines[i], i + 1, "coefs", n, negate=True)[:n] for i in range(4, 4 + m)]
    objective = _read_values(lines[4 + m], 5 + m, "objective", n + 1)[:n + 1]

    return LinearProgram(
        m=m, n=n,
        tight=tight, loose=loose,
        constants=constants, coefs=coefs, objective=objective,
        to_maximise=to_maximise, to_integer=to_integer,
        advanced=advanced if advanced is not None else AdvancedOptions(),
    )


def parse(raw_text, to_maximise=DEFAULTS['to_maximise'], to_integer=DEFAULTS['to_integer'], advanced=None):
    """
    Parse the text description of a linear program.

    The format is:

        M N
        t_1 ... t_M             (tight indices)
        l_1 ... l_N             (loose indices)
        b_1 ... b_M             (constants)
        a_i1 ... a_iN           (M constraint rows, negated on ingestion)
        c_0 c_1 ... c_N         (objective, constant term first)

    Raises a ValidationError subclass at the first problem found; a partial
    LinearProgram is never returned. ``to_maximise``, ``to_integer`` and
    ``advanced`` are not part of the text and are passed through.
    """
    content = normalize(raw_text)
    check_content(content)
    return parse_lines(split_lines(content), to_maximise=to_maximise, to_integer=to_integer,
                       advanced=advanced)


def parse_file(path, **kwargs):
    """Read a UTF-8 text file and parse it, see parse()."""
    with open(path, encoding="utf-8") as handle:
        return parse(handle.read(), **kwargs)


def validate_text(raw_text):
    """Return (True, message) when the text parses, (False, error message) otherwise."""
    try:
        program = parse(raw_text)
    except ValidationError as e:
        return False, f"The content is not the expected one: {e}"
    return True, f"Valid problem with {program.m} constraints and {program.n} variables."


# Example Usage
if __name__ == "__main__":
    try:
        problem = parse_file(sys.argv[1]) if len(sys.argv) > 1 else parse(EXAMPLE_PROBLEM_TEXT)
    except ValidationError as e:
        print(f"Invalid problem: {e}")
        sys.exit(1)
    print(json.dumps(problem.to_dict(), indent=2))
