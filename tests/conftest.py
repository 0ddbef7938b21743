import random

import pytest

from abstats import VariantObservation


@pytest.fixture
def control():
    return VariantObservation(visitors=1000, conversions=100)


@pytest.fixture
def winning_variant():
    return VariantObservation(visitors=1000, conversions=130)


@pytest.fixture
def losing_variant():
    return VariantObservation(visitors=1000, conversions=70)


@pytest.fixture
def rng():
    return random.Random(42)
