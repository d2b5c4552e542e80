import pytest

from rng_utils import make_rng, round_half_up, weighted_choice


class FixedRoll:
    def __init__(self, value):
        self.value = value

    def randint(self, a, b):
        assert a == 1
        return self.value


@pytest.mark.parametrize("roll,expected", [(1, 'x'), (60, 'x'), (61, 'y'), (90, 'y'), (91, 'z'), (100, 'z')])
def test_weighted_choice_cumulative(roll, expected):
    assert weighted_choice(FixedRoll(roll), [('x', 60), ('y', 30), ('z', 10)]) == expected


def test_seeded_rngs_repeat():
    a, b = make_rng(7), make_rng(7)
    assert [a.randint(1, 100) for _ in range(10)] == [b.randint(1, 100) for _ in range(10)]


@pytest.mark.parametrize("value,expected", [(4.5, 5), (4.49, 4), (2.5, 3), (0.0, 0), (1.5, 2)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
