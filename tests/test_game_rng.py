import pytest

from delve.game_rng import GameRNG


def test_same_seed_same_sequence():
    a = GameRNG(seed=99)
    b = GameRNG(seed=99)
    assert [a.get_int(0, 1000) for _ in range(20)] == [
        b.get_int(0, 1000) for _ in range(20)
    ]


def test_get_int_is_inclusive():
    rng = GameRNG(seed=1)
    values = {rng.get_int(1, 3) for _ in range(200)}
    assert values == {1, 2, 3}


def test_get_randrange_excludes_stop():
    rng = GameRNG(seed=2)
    values = {rng.get_randrange(4) for _ in range(200)}
    assert values == {0, 1, 2, 3}
    assert all(5 <= rng.get_randrange(5, 7) < 7 for _ in range(50))


def test_invalid_ranges_raise():
    rng = GameRNG(seed=3)
    with pytest.raises(ValueError):
        rng.get_int(5, 1)
    with pytest.raises(ValueError):
        rng.get_randrange(0)
    with pytest.raises(ValueError):
        rng.choice([])


def test_ints_array():
    rng = GameRNG(seed=4)
    values = rng.get_ints_array(0, 3, 500)
    assert values.shape == (500,)
    assert values.min() >= 0 and values.max() <= 3


def test_coin_flip_extremes():
    rng = GameRNG(seed=5)
    assert not any(rng.coin_flip(0.0) for _ in range(20))
    assert all(rng.coin_flip(1.0) for _ in range(20))


def test_roll_dice_bounds():
    rng = GameRNG(seed=6)
    for _ in range(50):
        assert 3 <= rng.roll_dice(3, 6) <= 18


def test_state_restore_replays_sequence():
    rng = GameRNG(seed=7)
    state = rng.get_state()
    first = [rng.get_int(0, 100) for _ in range(5)]
    rng.set_state(state)
    assert [rng.get_int(0, 100) for _ in range(5)] == first
    assert rng.initial_seed == 7
