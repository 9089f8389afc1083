import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from cart_core.ftypes import Maybe, Either


def test_maybe_first():
    found = Maybe.first(lambda x: x > 2, [1, 2, 3, 4])
    missing = Maybe.first(lambda x: x > 10, [1, 2, 3])

    assert found.is_some()
    assert found.get_or_else(0) == 3
    assert missing.is_none()
    assert missing.get_or_else(0) == 0


def test_maybe_map():
    assert Maybe.some(10).map(lambda x: x * 2).get_or_else(0) == 20
    assert Maybe.nothing().map(lambda x: x * 2).is_none()


def test_either_attempt():
    ok = Either.attempt(lambda: int("42"), (ValueError,))
    bad = Either.attempt(lambda: int("x"), (ValueError,))

    assert ok.is_right and ok.value == 42
    assert bad.is_left
    assert bad.value["type"] == "ValueError"
    assert bad.get_or_else(-1) == -1


def test_either_bind_stops_on_left():
    calls = []

    def step(x):
        calls.append(x)
        return Either.right(x + 1)

    assert Either.right(1).bind(step).map(lambda x: x * 10).get_or_else(0) == 20
    assert Either.left({"error": "boom"}).bind(step).is_left
    assert calls == [1]
