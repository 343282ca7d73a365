"""Mappable containers — one ``fmap`` for every container shape.

``fmap(container, fn)`` applies *fn* to each element and returns a
container of the same shape. Instances are registered per container type
with ``functools.singledispatch``:

  list / tuple   element-wise, same type and length
  Maybe          optional single value; an empty Maybe stays empty
  Box            exactly one value

``contents(container)`` lists the elements so that aggregate passes
(e.g. min/max for normalisation) can look across a container without
knowing its shape. Adding a container type means registering both.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import singledispatch
from typing import Any, Generic, TypeVar

A = TypeVar("A")


@dataclass(frozen=True)
class Maybe(Generic[A]):
    """Optional value: either holds one element or is empty."""

    value: A | None = None
    present: bool = False

    @classmethod
    def of(cls, value: A) -> Maybe[A]:
        return cls(value=value, present=True)

    @classmethod
    def empty(cls) -> Maybe[Any]:
        return cls()

    @classmethod
    def from_optional(cls, value: A | None) -> Maybe[A]:
        return cls.empty() if value is None else cls.of(value)

    def get_or(self, default: A) -> A:
        return self.value if self.present else default  # type: ignore[return-value]


@dataclass(frozen=True)
class Box(Generic[A]):
    """Container holding exactly one value."""

    value: A


@singledispatch
def fmap(container: Any, fn: Callable[[Any], Any]) -> Any:
    raise TypeError(f"No fmap instance for {type(container).__name__}")


@fmap.register
def _(container: list, fn: Callable[[Any], Any]) -> list:
    return [fn(x) for x in container]


@fmap.register
def _(container: tuple, fn: Callable[[Any], Any]) -> tuple:
    return tuple(fn(x) for x in container)


@fmap.register
def _(container: Maybe, fn: Callable[[Any], Any]) -> Maybe:
    if not container.present:
        return container
    return Maybe.of(fn(container.value))


@fmap.register
def _(container: Box, fn: Callable[[Any], Any]) -> Box:
    return Box(fn(container.value))


@singledispatch
def contents(container: Any) -> list[Any]:
    raise TypeError(f"No contents instance for {type(container).__name__}")


@contents.register(list)
@contents.register(tuple)
def _(container: list | tuple) -> list[Any]:
    return list(container)


@contents.register
def _(container: Maybe) -> list[Any]:
    return [container.value] if container.present else []


@contents.register
def _(container: Box) -> list[Any]:
    return [container.value]
