## prayog — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from .errors import *
from .evaluator import Evaluator, Value, Void, ExitRequested, Failure, FailureKind

_EVALUATOR = Evaluator()

def __getattr__(name):
    return getattr(_EVALUATOR, name)
