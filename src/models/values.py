"""
Evaluator result model

A script chunk produces text, a number, or nothing the preprocessor can use.
The set of kinds is closed on purpose: new runtime types must be mapped onto
one of these three before they reach the scanner.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Any, Optional, Union


class ValueKind(Enum):
    """Classification of an evaluator result"""
    TEXT = "text"
    NUMBER = "number"
    NONE = "none"


@dataclass(frozen=True)
class Value:
    """
    Tagged evaluator result

    Attributes:
        kind: Which of the three cases this is
        payload: str for TEXT, int or float for NUMBER, None for NONE
    """
    kind: ValueKind
    payload: Optional[Union[str, int, float]] = None

    @classmethod
    def text(cls, payload: str) -> "Value":
        return cls(ValueKind.TEXT, payload)

    @classmethod
    def number(cls, payload: Union[int, float]) -> "Value":
        return cls(ValueKind.NUMBER, payload)

    @classmethod
    def none(cls) -> "Value":
        return cls(ValueKind.NONE)

    def rendered(self) -> Optional[str]:
        """
        Text to emit for this value, or None when it contributes nothing.

        Numbers use their canonical decimal form (``str(2)`` -> ``"2"``,
        ``str(2.5)`` -> ``"2.5"``).
        """
        if self.kind is ValueKind.TEXT:
            return str(self.payload)
        if self.kind is ValueKind.NUMBER:
            return str(self.payload)
        return None


def value_classify(obj: Any) -> Value:
    """
    Map a runtime object onto the closed Value enumeration.

    Booleans are not numbers here even though ``bool`` subclasses ``int``.
    Tuples (multiple return values) are classified by their first element.

    Args:
        obj: Object returned by a script runtime

    Returns:
        Value with kind TEXT, NUMBER or NONE
    """
    if isinstance(obj, tuple):
        obj = obj[0] if obj else None
    if isinstance(obj, bytes):
        return Value.text(obj.decode("utf-8", errors="replace"))
    if isinstance(obj, str):
        return Value.text(obj)
    if isinstance(obj, bool):
        return Value.none()
    if isinstance(obj, (int, float)):
        return Value.number(obj)
    return Value.none()
