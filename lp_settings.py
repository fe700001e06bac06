# lp_settings.py
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _symbol(name, default):
    return os.getenv(f"SIMPLEX_SYMBOL_{name.upper()}", default)


# Symbols used in equations and tableau headers
SYMBOLS = {
    'objective': _symbol('objective', "z"),
    'variable': _symbol('variable', "x"),
    'coefficient': _symbol('coefficient', "c"),
    'artificial': _symbol('artificial', "y"),
    'constant': _symbol('constant', "b"),
    'auxiliary': _symbol('auxiliary', "\\lambda"),
    'rhs': _symbol('rhs', "\\text{RHS}"),
}

# Raw labels the solver uses for the reserved columns
LAMBDA_LABEL = "L"
RHS_LABEL = "RHS"

# Values the text format does not carry
DEFAULTS = {
    'to_maximise': True,
    'to_integer': False,
    'max_iterations': 2147483647,
    'pivot_selection_rule': "DANTZIG",
    'integer_method': "NONE",
}

# The solver stores integral fields as 32 bit integers
MAX_ABS_VALUE = 2147483648


EXAMPLE_PROBLEM_TEXT = """3 2
1 2 3
4 5
12 9 2
2 3
3 1
-1 -1
0 1 1
"""


def create_example_response():
    """Recorded solver answer for a 3 constraints, 3 variables problem (optimum 765/41)."""
    return {
        "error": None,
        "feasibility": 0,
        "optimum": "765 / 41",
        "values": ["89 / 41", "50 / 41", "62 / 41"],
        "code": 200,
        "status": "OK",
        "steps": [
            {"out": None, "in": None, "twophase": False, "dualcut": False,
             "table": [["0", "3", "5", "4", "0", "0", "0"],
                       ["8", "2", "3", "0", "1", "0", "0"],
                       ["10", "0", "2", "5", "0", "1", "0"],
                       ["15", "3", "2", "4", "0", "0", "1"]],
             "basicId": [3, 4, 5]},
            {"out": 1, "in": 2, "twophase": False, "dualcut": False,
             "table": [["-40 / 3", "-1 / 3", "0", "4", "-5 / 3", "0", "0"],
                       ["8 / 3", "2 / 3", "1", "0", "1 / 3", "0", "0"],
                       ["14 / 3", "-4 / 3", "0", "5", "-2 / 3", "1", "0"],
                       ["29 / 3", "5 / 3", "0", "4", "-2 / 3", "0", "1"]],
             "basicId": [1, 4, 5]},
            {"out": 2, "in": 3, "twophase": False, "dualcut": False,
             "table": [["-256 / 15", "11 / 15", "0", "0", "-17 / 15", "-4 / 5", "0"],
                       ["8 / 3", "2 / 3", "1", "0", "1 / 3", "0", "0"],
                       ["14 / 15", "-4 / 15", "0", "1", "-2 / 15", "1 / 5", "0"],
                       ["89 / 15", "41 / 15", "0", "0", "-2 / 15", "-4 / 5", "1"]],
             "basicId": [1, 2, 5]},
            {"out": 3, "in": 1, "twophase": False, "dualcut": False,
             "table": [["-765 / 41", "0", "0", "0", "-45 / 41", "-24 / 41", "-11 / 41"],
                       ["50 / 41", "0", "1", "0", "15 / 41", "8 / 41", "-10 / 41"],
                       ["62 / 41", "0", "0", "1", "-6 / 41", "5 / 41", "4 / 41"],
                       ["89 / 41", "1", "0", "0", "-2 / 41", "-12 / 41", "15 / 41"]],
             "basicId": [1, 2, 0]},
            {"out": None, "in": None, "twophase": False, "dualcut": False,
             "table": [["-765 / 41", "0", "0", "0", "-45 / 41", "-24 / 41", "-11 / 41"],
                       ["50 / 41", "0", "1", "0", "15 / 41", "8 / 41", "-10 / 41"],
                       ["62 / 41", "0", "0", "1", "-6 / 41", "5 / 41", "4 / 41"],
                       ["89 / 41", "1", "0", "0", "-2 / 41", "-12 / 41", "15 / 41"]],
             "basicId": [1, 2, 0]},
        ],
        "labels": ["RHS", "L", "x0", "x1", "x2", "y0", "y1", "y2"],
    }
