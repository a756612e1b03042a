import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from shopcore.compose import pipe, pipe_either
from shopcore.errors import InvalidQuantity, NotFound
from shopcore.ftypes import Either, Maybe


# ТЕСТЫ Maybe
def test_maybe_some_and_none_behavior():
    just = Maybe.some(42)
    nothing = Maybe.nothing()

    assert just.is_some()
    assert nothing.is_none()
    assert just.get_or_else(0) == 42
    assert nothing.get_or_else(0) == 0


def test_maybe_of_wraps_optional():
    assert Maybe.of(None).is_none()
    assert Maybe.of(0).is_some()


def test_maybe_to_either():
    assert Maybe.some(5).to_either("missing") == Either.right(5)
    assert Maybe.nothing().to_either(NotFound(7)) == Either.left(NotFound(7))


# ТЕСТЫ Either
def test_either_left_and_right_behavior():
    right_val = Either.right(100)
    left_val = Either.left(InvalidQuantity(0))

    assert right_val.is_right
    assert left_val.is_left
    assert right_val.get_or_else(0) == 100
    assert left_val.get_or_else(0) == 0


def test_either_map_bind_skip_left():
    err = Either.left(NotFound(1))

    assert err.map(lambda x: x * 2) is err
    assert err.bind(lambda x: Either.right(x)) is err
    assert Either.right(5).bind(lambda x: Either.right(x + 3)).value == 8


def test_either_fold():
    assert Either.right(2).fold(lambda e: "err", lambda v: v * 10) == 20
    assert Either.left("x").fold(lambda e: "err", lambda v: v * 10) == "err"


# ТЕСТЫ композиции
def test_pipe_applies_left_to_right():
    assert pipe(lambda x: x + 1, lambda x: x * 10)(1) == 20


def test_pipe_either_short_circuits():
    calls = []

    def fail(x):
        calls.append("fail")
        return Either.left(InvalidQuantity(x))

    def never(x):
        calls.append("never")
        return Either.right(x)

    result = pipe_either(lambda x: Either.right(x - 1), fail, never)(1)

    assert result == Either.left(InvalidQuantity(0))
    assert calls == ["fail"]
