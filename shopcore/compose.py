from functools import reduce
from typing import Any, Callable

from .ftypes import Either


def pipe(*funcs: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """pipe(f, g, h)(x) == h(g(f(x)))"""
    return reduce(lambda f, g: lambda x: g(f(x)), funcs)


def pipe_either(*steps: Callable[[Any], Either]) -> Callable[[Any], Either]:
    """
    Конвейер шагов-валидаций: каждый шаг получает Right-значение предыдущего.
    Первый Left останавливает конвейер.
    """
    return lambda x: reduce(lambda acc, step: acc.bind(step), steps, Either.right(x))
