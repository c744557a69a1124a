import pytest

from plantdash.services.noise import in_range, noise


@pytest.mark.parametrize("seed", [0, 1, 7, 100, 12345, 2.5, -3])
def test_noise_is_deterministic(seed):
    assert noise(seed) == noise(seed)


def test_noise_stays_in_unit_interval():
    for seed in range(5000):
        value = noise(seed)
        assert 0 <= value < 1


def test_noise_varies_with_seed():
    values = {noise(seed) for seed in range(100)}
    assert len(values) == 100


def test_in_range_maps_noise_into_bounds():
    for seed in range(500):
        value = in_range(90, 150, seed)
        assert 90 <= value < 150
        assert value == pytest.approx(90 + noise(seed) * 60)
