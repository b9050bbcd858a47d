"""
Exception classes for msformula.

Provides rich error information with actionable suggestions. Every error
names the offending term, state or attribute so a failed compilation can be
traced back to the covariate line that caused it.
"""

from typing import List, Optional, Dict, Any, Sequence


class MsFormulaError(Exception):
    """
    Base exception class for msformula with rich error information.

    Provides structured error information including suggestions for resolution
    and the context in which the error occurred.
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.suggestions = suggestions or []
        self.error_code = error_code
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return formatted error message with suggestions."""
        message = super().__str__()

        if self.error_code:
            message = f"[{self.error_code}] {message}"

        if self.suggestions:
            message += "\n\nSuggestions:"
            for i, suggestion in enumerate(self.suggestions, 1):
                message += f"\n  {i}. {suggestion}"

        return message


def _joined(values: Sequence[Any]) -> str:
    return ", ".join(str(v) for v in values)


class FormulaShapeError(MsFormulaError):
    """Raised when a covariate line does not have the expected structure."""

    def __init__(self, formula: Optional[str] = None, issue: Optional[str] = None, **kwargs):
        if formula and issue:
            message = f"Invalid covariate formula '{formula}': {issue}"
        elif formula:
            message = f"Invalid covariate formula: {formula}"
        else:
            message = f"Invalid covariate formula: {issue or 'unknown problem'}"

        suggestions = kwargs.pop("suggestions", None) or [
            "Each line needs a transition selector and covariates: '1:2 ~ age + sex'",
            "Options follow a slash at the end: '1:2 + 1:3 ~ age / common'",
        ]
        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code=kwargs.pop("error_code", "FORMULA_SHAPE"),
            context={"formula": formula, "issue": issue},
            **kwargs
        )


class ExpressionSyntaxError(FormulaShapeError):
    """Raised by the expression parser for malformed text."""

    def __init__(self, text: str, position: int, issue: str):
        self.position = position
        super().__init__(
            formula=text,
            issue=f"{issue} at position {position}",
            suggestions=[
                "Check for unbalanced parentheses",
                "Operators supported: ~ + - * / : ^ %in%",
            ],
            error_code="SYNTAX",
        )


class UnknownOptionError(MsFormulaError):
    """Raised when an option clause names something other than common, shared or init."""

    def __init__(self, options: Sequence[str], **kwargs):
        self.options = list(options)
        super().__init__(
            message=f"Option not recognized in a covariates formula: {_joined(self.options)}",
            suggestions=[
                "Valid options are: common, shared, init(...)",
                "Wrap a variable named like an option in parentheses to hide it from the option parser",
            ],
            error_code="UNKNOWN_OPTION",
            context={"options": self.options},
            **kwargs
        )


class TermMissingColonError(MsFormulaError):
    """Raised when a transition selector term is not of the form 'from:to'."""

    def __init__(self, term: str, **kwargs):
        self.term = term
        super().__init__(
            message=f"Transition term found without a ':': {term}",
            suggestions=[
                "Write each transition as 'from:to', e.g. '1:2' or 'healthy:dead'",
                "Join several transitions with '+': '1:2 + 1:3'",
            ],
            error_code="MISSING_COLON",
            context={"term": term},
            **kwargs
        )


class NonIntegerStateError(MsFormulaError):
    """Raised when a numeric state reference is not an integer."""

    def __init__(self, values: Sequence[float], **kwargs):
        self.values = list(values)
        super().__init__(
            message=f"Non-integer state number: {_joined(self.values)}",
            suggestions=["State numbers refer to positions in the state list, starting at 1"],
            error_code="NON_INTEGER_STATE",
            context={"values": self.values},
            **kwargs
        )


class StateIndexOutOfRangeError(MsFormulaError):
    """Raised when a numeric state reference falls outside 1..nstate."""

    def __init__(self, values: Sequence[int], n_states: int, **kwargs):
        self.values = list(values)
        self.n_states = n_states
        super().__init__(
            message=f"Numeric state is out of range 1..{n_states}: {_joined(self.values)}",
            suggestions=[
                "Use 0 to refer to all states",
                f"Valid state numbers are 1 through {n_states}",
            ],
            error_code="STATE_RANGE",
            context={"values": self.values, "n_states": n_states},
            **kwargs
        )


class AttributeNotFoundError(MsFormulaError):
    """Raised when a selector uses a state attribute that the state table lacks."""

    def __init__(self, attribute: str, available: Optional[Sequence[str]] = None, **kwargs):
        self.attribute = attribute
        available = list(available or [])
        suggestions = ["Add the attribute as a column of the state table"]
        if available:
            suggestions.insert(0, f"Available state attributes: {_joined(available)}")
        super().__init__(
            message=f"{attribute}: state variable not found",
            suggestions=suggestions,
            error_code="ATTRIBUTE_NOT_FOUND",
            context={"attribute": attribute, "available": available},
            **kwargs
        )


class AttributeValueNotFoundError(MsFormulaError):
    """Raised when a state attribute selector names a value no state carries."""

    def __init__(self, attribute: str, values: Sequence[Any], **kwargs):
        self.attribute = attribute
        self.values = list(values)
        super().__init__(
            message=f"{_joined(self.values)}: state value not found for attribute '{attribute}'",
            suggestions=[f"Check the values of '{attribute}' in the state table"],
            error_code="ATTRIBUTE_VALUE_NOT_FOUND",
            context={"attribute": attribute, "values": self.values},
            **kwargs
        )


class StateNameNotFoundError(MsFormulaError):
    """Raised when a selector names a state that does not exist."""

    def __init__(self, names: Sequence[Any], available: Optional[Sequence[str]] = None, **kwargs):
        self.names = list(names)
        available = list(available or [])
        suggestions = ["State names are case sensitive"]
        if available:
            suggestions.insert(0, f"Known states: {_joined(available)}")
        super().__init__(
            message=f"{_joined(self.names)}: state not found",
            suggestions=suggestions,
            error_code="STATE_NOT_FOUND",
            context={"names": self.names, "available": available},
            **kwargs
        )


class MissingStateColumnError(MsFormulaError):
    """Raised when the state table has no column holding the state names."""

    def __init__(self, column: str = "state", **kwargs):
        self.column = column
        super().__init__(
            message=f"The state table must contain a variable '{column}'",
            suggestions=[f"Add a '{column}' column listing every state name"],
            error_code="MISSING_STATE_COLUMN",
            context={"column": column},
            **kwargs
        )


class IncompleteStateTableError(MsFormulaError):
    """Raised when the state table does not cover every state in the model."""

    def __init__(self, missing: Sequence[str], **kwargs):
        self.missing = list(missing)
        super().__init__(
            message=f"State table does not contain all the possible states: {_joined(self.missing)}",
            suggestions=["Add one row per state to the state table"],
            error_code="INCOMPLETE_STATE_TABLE",
            context={"missing": self.missing},
            **kwargs
        )


class TermMatchFailureError(MsFormulaError):
    """
    Raised when a formula term has no counterpart in the term catalog.

    This is an internal invariant violation: a catalog pooled from the same
    formulas always contains every term.
    """

    def __init__(self, terms: Sequence[str], **kwargs):
        self.terms = list(terms)
        super().__init__(
            message=f"Term(s) not found in the term catalog: {_joined(self.terms)}",
            suggestions=[
                "Build the catalog from the default formula and every covariate line",
                "Report this as a bug if the catalog came from TermCatalog.from_formulas",
            ],
            error_code="TERM_MATCH",
            context={"terms": self.terms},
            **kwargs
        )


class DesignLayoutError(MsFormulaError):
    """Raised when design-matrix columns cannot be built for a term."""

    def __init__(self, term: str, issue: str, **kwargs):
        self.term = term
        super().__init__(
            message=f"Cannot build design columns for '{term}': {issue}",
            suggestions=kwargs.pop("suggestions", None) or [
                "Check that every covariate exists in the data",
                "Supported functions: log, exp, sqrt, abs, I",
            ],
            error_code="DESIGN_LAYOUT",
            context={"term": term, "issue": issue},
            **kwargs
        )


class InitValueError(MsFormulaError):
    """Raised when init(...) values do not fit the final coefficient layout."""

    def __init__(self, terms: Sequence[str], expected: int, received: int, **kwargs):
        self.terms = list(terms)
        super().__init__(
            message=(
                f"init() for terms {_joined(self.terms)} supplies {received} "
                f"value(s), expected 1 or {expected}"
            ),
            suggestions=[
                "Give one value per design column of the line's terms",
                "A single value is recycled across all of them",
            ],
            error_code="INIT_VALUES",
            context={"terms": self.terms, "expected": expected, "received": received},
            **kwargs
        )


class ConfigurationError(MsFormulaError):
    """Exception raised for configuration issues."""

    def __init__(self, config_key: Optional[str] = None, **kwargs):
        if config_key:
            message = f"Invalid configuration for '{config_key}'"
            suggestions = [
                f"Check the value for configuration key '{config_key}'",
                "Review configuration file syntax",
                "Check environment variable formatting",
            ]
        else:
            message = "Configuration error"
            suggestions = [
                "Check configuration file syntax",
                "Verify all required settings are provided",
            ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="CONFIG",
            context={"config_key": config_key},
            **kwargs
        )


class ValidationError(MsFormulaError):
    """Exception raised when an input array or table fails validation."""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None, **kwargs):
        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code=kwargs.pop("error_code", "VALIDATION"),
            **kwargs
        )
