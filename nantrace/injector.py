"""Injection decision engine.

An ``Injector`` holds the policy for substituting NaNs: whether injection is
active, how many injections remain, the odds of injecting on any one call,
and an optional scope restriction. Deciding and committing are separate
steps::

    injector = Injector(odds=10, ninject=3, libraries={"scipy"})
    if injector.should_inject():
        result = math.nan
        injector.decrement_injections()
        log.log_event(injected_event("mul", [repr(a), repr(b)]))

A caller may decline to inject after a True answer without consuming budget.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from nantrace.frames import CallFrame, FunctionRef, capture_stack
from nantrace.scope import injectable_region

logger = logging.getLogger(__name__)


@dataclass
class Injector:
    """Policy and remaining budget for NaN injection.

    ``functions`` and ``libraries`` work together as a union: the set of
    possible injection points is the union of the places matched by each.
    When both are empty, injection happens only inside recognized library
    code (never in the caller's own script or the standard library).

    Attributes:
        active: Inject only if True.
        odds: Inject with probability ``1 / odds``. Higher means rarer.
        ninject: Remaining number of injections. Only decreases, and only
            through ``decrement_injections``.
        functions: Function scopes that allow injection.
        libraries: Library names that allow injection.
        seed: Seed for the injector's private RNG. None seeds from the OS.
    """

    active: bool = True
    odds: int = 10
    ninject: int = 1
    functions: set[FunctionRef] = field(default_factory=set)
    libraries: set[str] = field(default_factory=set)
    seed: int | None = None
    _rng: random.Random = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.odds < 1:
            raise ValueError(f"odds must be >= 1, got {self.odds}")
        if self.ninject < 0:
            raise ValueError(f"ninject must be >= 0, got {self.ninject}")
        self.functions = set(self.functions)
        self.libraries = set(self.libraries)
        self._rng = random.Random(self.seed)

    @classmethod
    def for_functions(cls, refs: Iterable[tuple[str, str]], **kwargs) -> Injector:
        """Build an injector restricted to ``(function name, file name)`` pairs."""
        return cls(functions={FunctionRef(name, file) for name, file in refs}, **kwargs)

    def roll(self) -> int:
        """Draw one integer uniformly from ``[1, odds]``."""
        return self._rng.randint(1, self.odds)

    def should_inject(self, stack: Sequence[CallFrame] | None = None) -> bool:
        """Method form of the module-level :func:`should_inject`."""
        if stack is None:
            stack = capture_stack(skip=1)
        return should_inject(self, stack)

    def decrement_injections(self) -> None:
        """Method form of the module-level :func:`decrement_injections`."""
        decrement_injections(self)


def should_inject(injector: Injector, stack: Sequence[CallFrame] | None = None) -> bool:
    """Return whether or not a NaN should be injected now.

    Decision process:

    - The injector must be active and have budget left.
    - An ``odds``-sided die is rolled; anything but 1 declines.
    - The stack must lie in the injector's injectable region.

    The roll is the only side effect; ``ninject`` is never touched here.

    Args:
        injector: The policy to consult.
        stack: Stack snapshot, innermost first. Defaults to the caller's
            live stack.
    """
    if not injector.active or injector.ninject <= 0:
        return False

    if injector.roll() != 1:
        return False

    if stack is None:
        stack = capture_stack(skip=1)

    decision = injectable_region(injector, stack)
    logger.debug("Injection decision %s (remaining=%d)", decision, injector.ninject)
    return decision


def decrement_injections(injector: Injector) -> None:
    """Commit one injection against the budget."""
    injector.ninject -= 1
    logger.debug("Injection committed, %d remaining", injector.ninject)
