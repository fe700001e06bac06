from dataclasses import dataclass, field
from enum import Enum, IntEnum
from fractions import Fraction
from typing import Optional, Tuple

import numpy as np

from lp_settings import DEFAULTS, MAX_ABS_VALUE


# Custom Exception Classes for input validation
class ValidationError(ValueError):
    """
    Raised when a problem description cannot be turned into a LinearProgram.

    :param message: human readable description of the problem
    :param literal: the offending text, if any
    :param line: 1-based line number in the input text, if any
    :param field: name of the LinearProgram field being read, if any
    """
    def __init__(self, message, literal=None, line=None, field=None):
        super().__init__(message)
        self.message = message
        self.literal = literal
        self.line = line
        self.field = field

    def __str__(self):
        if self.line is not None:
            return f"line {self.line}: {self.message}"
        return self.message

class NonNumericContentError(ValidationError):
    """Raised when the text contains something other than well formed numbers."""
    pass

class InsufficientLinesError(ValidationError):
    """Raised when the text has fewer lines than the declared problem needs."""
    pass

class InvalidDimensionError(ValidationError):
    """Raised when M or N is missing or lower than 1."""
    pass

class MalformedNumberError(ValidationError):
    """Raised by the number lexer, ``reason`` tells which rule the token broke."""
    def __init__(self, message, literal=None, line=None, field=None, reason=None):
        super().__init__(message, literal=literal, line=line, field=field)
        self.reason = reason

class NotEnoughValuesError(ValidationError):
    """Raised when a line holds fewer values than M or N requires."""
    pass

class InvalidIndexError(ValidationError):
    """Raised when a tight/loose index is not a positive whole number."""
    pass

class ValueOutOfRangeError(ValidationError):
    """Raised when a value is beyond what the solver can store."""
    pass


class Feasibility(IntEnum):
    """Outcome code sent back by the solver."""
    UNKNOWN = -1
    FEASIBLE = 0
    INFEASIBLE = 1
    UNBOUNDED = 2
    ITERATIONS = 3

    @classmethod
    def from_code(cls, code):
        try:
            return cls(int(code))
        except (TypeError, ValueError):
            return cls.UNKNOWN


class PivotSelectionRule(Enum):
    DANTZIG = "DANTZIG"
    BLAND = "BLAND"
    GREEDY = "GREEDY"
    RANDOM = "RANDOM"


class IntegerMethod(Enum):
    NONE = "NONE"
    GOMORY = "GOMORY"
    BRANCH_AND_BOUND = "BRANCH_AND_BOUND"
    BRANCH_AND_CUT = "BRANCH_AND_CUT"


def parse_fraction(value):
    """
    Convert a fraction-as-string ("3", "-8 / 3") into an exact Fraction.

    Returns None when the value cannot be read as a rational number.
    """
    if value is None:
        return None
    if isinstance(value, (int, Fraction)):
        return Fraction(value)
    try:
        return Fraction(str(value).replace(" ", ""))
    except (ValueError, ZeroDivisionError):
        return None


@dataclass(frozen=True)
class AdvancedOptions:
    """Optional solver tuning forwarded with the problem."""
    max_iterations: int = DEFAULTS['max_iterations']
    pivot_selection_rule: PivotSelectionRule = PivotSelectionRule[DEFAULTS['pivot_selection_rule']]
    integer_method: IntegerMethod = IntegerMethod[DEFAULTS['integer_method']]

    def __post_init__(self):
        # Accept the enum names as plain strings too
        object.__setattr__(self, 'pivot_selection_rule', PivotSelectionRule(self.pivot_selection_rule))
        object.__setattr__(self, 'integer_method', IntegerMethod(self.integer_method))
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1 (got {self.max_iterations}).")

    def to_dict(self):
        return {
            "maxIterations": self.max_iterations,
            "pivotSelectionRule": self.pivot_selection_rule.value,
            "integerMethod": self.integer_method.value,
        }


@dataclass(frozen=True)
class LinearProgram:
    """
    A validated linear program, as read from the text format.

    ``coefs`` is stored with the sign the solver expects, which is the
    negation of the rows written in the text format. ``objective[0]`` is the
    constant term of the objective function.
    """
    m: int
    n: int
    tight: Tuple[int, ...]
    loose: Tuple[int, ...]
    constants: Tuple[float, ...]
    coefs: Tuple[Tuple[float, ...], ...]
    objective: Tuple[float, ...]
    to_maximise: bool = DEFAULTS['to_maximise']
    to_integer: bool = DEFAULTS['to_integer']
    advanced: AdvancedOptions = field(default_factory=AdvancedOptions)

    def __post_init__(self):
        # Normalise containers so the instance stays immutable
        object.__setattr__(self, 'tight', tuple(self.tight))
        object.__setattr__(self, 'loose', tuple(self.loose))
        object.__setattr__(self, 'constants', tuple(float(v) for v in self.constants))
        object.__setattr__(self, 'coefs', tuple(tuple(float(v) for v in row) for row in self.coefs))
        object.__setattr__(self, 'objective', tuple(float(v) for v in self.objective))
        self._validate()

    def _validate(self):
        if self.m < 1:
            raise ValidationError(f"M must be at least 1 (got {self.m}).", field='m')
        if self.n < 1:
            raise ValidationError(f"N must be at least 1 (got {self.n}).", field='n')

        dimension_errors = []
        if len(self.tight) < self.m:
            dimension_errors.append(f"tight has {len(self.tight)} entries, expected at least {self.m}")
        if len(self.loose) < self.n:
            dimension_errors.append(f"loose has {len(self.loose)} entries, expected at least {self.n}")
        if len(self.constants) != self.m:
            dimension_errors.append(f"constants has {len(self.constants)} entries, expected {self.m}")
        if len(self.coefs) != self.m or any(len(row) != self.n for row in self.coefs):
            dimension_errors.append(f"coefs is not a {self.m}x{self.n} matrix")
        if len(self.objective) != self.n + 1:
            dimension_errors.append(f"objective has {len(self.objective)} entries, expected {self.n + 1}")
        if dimension_errors:
            raise ValidationError("; ".join(dimension_errors))

        for name, indices in [("tight", self.tight), ("loose", self.loose)]:
            for index in indices:
                if isinstance(index, bool) or not isinstance(index, int) or index <= 0:
                    raise InvalidIndexError(f"{name} entries must be positive whole numbers (got {index}).",
                                            literal=str(index), field=name)

        for name, values in [("constants", self.constants),
                             ("coefs", [v for row in self.coefs for v in row]),
                             ("objective", self.objective)]:
            array = np.asarray(values, dtype=float)
            if not np.all(np.isfinite(array)):
                raise ValidationError(f"{name} contains non-finite values (NaN or Inf).", field=name)
            if np.any(np.abs(array) > MAX_ABS_VALUE):
                raise ValueOutOfRangeError(f"{name} contains a value beyond +/-{MAX_ABS_VALUE}.", field=name)

    def as_arrays(self):
        """Return (objective, coefs, constants) as numpy arrays."""
        return (np.array(self.objective, dtype=float),
                np.array(self.coefs, dtype=float).reshape(self.m, self.n),
                np.array(self.constants, dtype=float))

    def to_dict(self):
        """Request body expected by the solving service."""
        relationship = "LEQ" if self.to_maximise else "GEQ"
        return {
            "m": self.m,
            "n": self.n,
            "tight": list(self.tight),
            "loose": list(self.loose),
            "constants": list(self.constants),
            "coefs": [list(row) for row in self.coefs],
            "objective": list(self.objective),
            "relationships": [relationship] * self.m,
            "toMaximise": self.to_maximise,
            "toInteger": self.to_integer,
            "advanced": self.advanced.to_dict(),
        }


@dataclass(frozen=True)
class SimplexStep:
    """
    One tableau snapshot of the solver trace.

    ``in_col``/``out_row`` are the pivot that produced this table (``in`` and
    ``out`` on the wire). ``basic_id`` holds, per constraint row, the index of
    its basic variable where 0 is the first column after the RHS.
    """
    in_col: Optional[int] = None
    out_row: Optional[int] = None
    twophase: bool = False
    dualcut: bool = False
    table: Tuple[Tuple[str, ...], ...] = ()
    basic_id: Tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'table', tuple(tuple(str(v) for v in row) for row in self.table))
        object.__setattr__(self, 'basic_id', tuple(self.basic_id))

    @classmethod
    def from_dict(cls, data):
        return cls(
            in_col=data.get("in"),
            out_row=data.get("out"),
            twophase=bool(data.get("twophase", False)),
            dualcut=bool(data.get("dualcut", False)),
            table=data.get("table") or (),
            basic_id=data.get("basicId") or (),
        )

    @property
    def height(self):
        return len(self.table)

    @property
    def width(self):
        return len(self.table[0]) if self.table else 0

    def is_consistent(self):
        """Check the basicId/table shape invariants."""
        if not self.table:
            return False
        if any(len(row) != self.width for row in self.table):
            return False
        return len(self.basic_id) == self.height - 1

    def to_matrix(self):
        """Table as a numpy object array of Fractions (None for unreadable cells, ragged rows padded)."""
        width = max((len(row) for row in self.table), default=0)
        matrix = np.full((self.height, width), None, dtype=object)
        for i, row in enumerate(self.table):
            for j, value in enumerate(row):
                matrix[i, j] = parse_fraction(value)
        return matrix


@dataclass(frozen=True)
class SimplexResponse:
    """Solver outcome plus the transport metadata that came with it."""
    feasibility: Feasibility = Feasibility.UNKNOWN
    optimum: str = ""
    values: Tuple[str, ...] = ()
    steps: Tuple[SimplexStep, ...] = ()
    labels: Tuple[str, ...] = ()
    code: int = -1
    status: str = "unknown"
    error: Optional[str] = None
    timed_out: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'feasibility', Feasibility.from_code(self.feasibility))
        object.__setattr__(self, 'values', tuple(self.values))
        object.__setattr__(self, 'steps', tuple(self.steps))
        object.__setattr__(self, 'labels', tuple(self.labels))

    @classmethod
    def from_dict(cls, data):
        """
        Build a response from the decoded JSON body.

        A ``None`` body means the request timed out.
        """
        if data is None:
            return cls(status="timeout", timed_out=True)
        optimum = data.get("optimum")
        return cls(
            feasibility=data.get("feasibility", Feasibility.UNKNOWN),
            optimum="" if optimum is None else str(optimum),
            values=[str(v) for v in data.get("values") or ()],
            steps=[SimplexStep.from_dict(s) for s in data.get("steps") or ()],
            labels=[str(label) for label in data.get("labels") or ()],
            code=data.get("code", -1),
            status=data.get("status", "unknown"),
            error=data.get("error"),
        )

    @property
    def has_error(self):
        return self.timed_out or (self.error is not None and self.feasibility == Feasibility.UNKNOWN)


def describe_transport_status(response):
    """Human readable outcome of the request, or None when the solver answered normally."""
    if response is None or response.timed_out:
        return "The request timed out."
    if response.error is not None and response.feasibility == Feasibility.UNKNOWN:
        if response.code != 500:
            return f"The problem was rejected: {response.error}"
        return "An error occurred on the server side."
    return None
