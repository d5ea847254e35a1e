"""
Allometric equation forms for treecarbon.

Growth coefficient tables tag each fitted equation with a short form name
('lin', 'quad', 'loglogw1', ...). This module maps those tags onto a closed
EquationForm enum and evaluates them.

Usage:
    from treecarbon.equations import EquationForm, evaluate_equation

    evaluate_equation(EquationForm.LINEAR, 10, {'a': 2, 'b': 3})  # 32.0
    evaluate_equation('quad', 2, {'a': 1, 'b': 2, 'c': 3})        # 17.0
"""
import math
from enum import Enum
from typing import Any, Mapping, Union

__all__ = [
    'EquationForm',
    'evaluate_equation',
    'MIN_LOG_INPUT',
]

# Lower bound applied to x inside log and sqrt sub-terms only
MIN_LOG_INPUT = 0.01


class EquationForm(str, Enum):
    """Equation forms used by the growth coefficient tables.

    Each member's value is the tag used in the source data. UNKNOWN covers
    every unrecognised tag and evaluates with the linear formula.
    """

    LINEAR = "lin"
    """y = a + b*x"""

    QUADRATIC = "quad"
    """y = a + b*x + c*x^2"""

    CUBIC = "cub"
    """y = a + b*x + c*x^2 + d*x^3"""

    LOGLOG_W1 = "loglogw1"
    """y = exp(a + b*ln(ln(x+1)) + mse/2)"""

    LOGLOG_W2 = "loglogw2"
    """y = exp(a + b*ln(ln(x+1)) + sqrt(x)*mse/2)"""

    LOGLOG_W3 = "loglogw3"
    """y = exp(a + b*ln(ln(x+1)) + x*mse/2)"""

    EXPONENTIAL = "expow1"
    """y = exp(a + b*x + mse/2)"""

    UNKNOWN = "unknown"
    """Unrecognised tag; evaluated as linear."""

    @classmethod
    def from_string(cls, tag: Any) -> "EquationForm":
        """Convert a form tag to an EquationForm.

        Matching is case-insensitive and ignores surrounding whitespace.
        Descriptive aliases ('linear', 'quadratic', 'cubic', 'exponential')
        are accepted as well. Never raises.

        Example:
            >>> EquationForm.from_string("LogLogW1")
            <EquationForm.LOGLOG_W1: 'loglogw1'>
            >>> EquationForm.from_string("spline")
            <EquationForm.UNKNOWN: 'unknown'>
        """
        if isinstance(tag, cls):
            return tag
        if tag is None:
            return cls.UNKNOWN

        normalized = str(tag).strip().lower()
        normalized = _ALIASES.get(normalized, normalized)
        for member in cls:
            if member.value == normalized:
                return member
        return cls.UNKNOWN

    @property
    def is_log_form(self) -> bool:
        """True for forms fitted on a log scale with an MSE bias correction."""
        return self in (EquationForm.LOGLOG_W1, EquationForm.LOGLOG_W2,
                        EquationForm.LOGLOG_W3, EquationForm.EXPONENTIAL)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"EquationForm.{self.name}"


_ALIASES = {
    'linear': 'lin',
    'quadratic': 'quad',
    'cubic': 'cub',
    'exponential': 'expow1',
}


def _coefficient(coeffs: Union[Mapping[str, Any], Any], name: str) -> float:
    """Read a coefficient from a mapping or a record, treating absent as 0."""
    if isinstance(coeffs, Mapping):
        value = coeffs.get(name)
    else:
        value = getattr(coeffs, name, None)
    return 0.0 if value is None else float(value)


def _safe_exp(value: float) -> float:
    try:
        return math.exp(value)
    except OverflowError:
        return math.inf


def evaluate_equation(form: Union[EquationForm, str], x: float,
                      coeffs: Union[Mapping[str, Any], Any]) -> float:
    """Evaluate an allometric equation.

    The function is total: unknown forms fall back to the linear formula and
    log/sqrt sub-terms use max(MIN_LOG_INPUT, x) so zero or negative inputs
    never hit a domain error. The raw x is still used in additive terms,
    including the x*mse/2 correction of LOGLOG_W3.

    Args:
        form: EquationForm member or raw form tag
        x: Independent variable value (e.g. dbh in cm or age in years)
        coeffs: GrowthCoefficientRecord or mapping with keys a, b, c, d, mse.
            Missing coefficients count as 0.

    Returns:
        Predicted value, never negative
    """
    form = EquationForm.from_string(form)
    a = _coefficient(coeffs, 'a')
    b = _coefficient(coeffs, 'b')
    c = _coefficient(coeffs, 'c')
    d = _coefficient(coeffs, 'd')
    mse = _coefficient(coeffs, 'mse')

    x_safe = max(MIN_LOG_INPUT, x)

    if form is EquationForm.LINEAR:
        y = a + b * x
    elif form is EquationForm.QUADRATIC:
        y = a + b * x + c * x ** 2
    elif form is EquationForm.CUBIC:
        y = a + b * x + c * x ** 2 + d * x ** 3
    elif form is EquationForm.LOGLOG_W1:
        y = _safe_exp(a + b * math.log(math.log(x_safe + 1)) + mse / 2)
    elif form is EquationForm.LOGLOG_W2:
        y = _safe_exp(a + b * math.log(math.log(x_safe + 1)) + math.sqrt(x_safe) * (mse / 2))
    elif form is EquationForm.LOGLOG_W3:
        y = _safe_exp(a + b * math.log(math.log(x_safe + 1)) + x * (mse / 2))
    elif form is EquationForm.EXPONENTIAL:
        y = _safe_exp(a + b * x + mse / 2)
    else:
        # EquationForm.UNKNOWN
        y = a + b * x

    return max(0.0, y)
