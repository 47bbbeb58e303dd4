from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping, Sequence
from typing import Callable, List, Optional

from .interface import AlgorithmDecision, AlgorithmState

logger = logging.getLogger(__name__)

DecideFunction = Callable[[AlgorithmState], object]


class MalformedDecisionError(ValueError):
    """Raised when a decision function returns something that is not a decision list."""


class CustomAlgorithm:
    """Wraps an externally supplied decision function.

    The function receives the same read-only :class:`AlgorithmState` as the
    built-in strategies. Exceptions and malformed results are logged and
    degrade to "no decisions this tick".
    """

    def __init__(
        self,
        func: DecideFunction,
        name: str = "Custom",
        reset: Optional[Callable[[], None]] = None,
    ) -> None:
        self.func = func
        self.name = name
        self._reset = reset

    @classmethod
    def from_import_path(cls, path: str, name: Optional[str] = None) -> "CustomAlgorithm":
        """Load ``package.module:function`` and wrap it."""

        module_name, _, attribute = path.partition(":")
        if not module_name or not attribute:
            raise ValueError(f"Expected 'module:function', got '{path}'")
        module = importlib.import_module(module_name)
        func = getattr(module, attribute)
        if not callable(func):
            raise ValueError(f"'{path}' is not callable")
        return cls(func, name=name or attribute)

    def reset(self) -> None:
        if self._reset is not None:
            self._reset()

    def decide(self, state: AlgorithmState) -> List[AlgorithmDecision]:
        try:
            result = self.func(state)
            return coerce_decisions(result)
        except Exception:
            logger.warning("Custom algorithm %r failed; skipping this tick", self.name, exc_info=True)
            return []


def coerce_decisions(result: object) -> List[AlgorithmDecision]:
    """Normalise a decision function's return value.

    Accepts ``None``, a sequence of :class:`AlgorithmDecision`, or a sequence
    of mappings with ``elevator`` and ``add_targets`` keys.
    """

    if result is None:
        return []
    if isinstance(result, (str, bytes)) or not isinstance(result, Sequence):
        raise MalformedDecisionError(f"expected a list of decisions, got {type(result).__name__}")

    decisions: List[AlgorithmDecision] = []
    for item in result:
        if isinstance(item, AlgorithmDecision):
            elevator, floors = item.elevator, item.add_targets
        elif isinstance(item, Mapping) and "elevator" in item and "add_targets" in item:
            elevator, floors = item["elevator"], item["add_targets"]
        else:
            raise MalformedDecisionError(f"unrecognised decision {item!r}")
        if not _is_int(elevator):
            raise MalformedDecisionError(f"elevator index must be an int, got {elevator!r}")
        if isinstance(floors, (str, bytes)) or not isinstance(floors, Sequence):
            raise MalformedDecisionError(f"add_targets must be a list, got {floors!r}")
        if not all(_is_int(floor) for floor in floors):
            raise MalformedDecisionError(f"target floors must be ints, got {floors!r}")
        decisions.append(AlgorithmDecision(elevator=elevator, add_targets=floors))
    return decisions


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
