import pytest
from pydantic import ValidationError

from config import Settings


def test_default_weights_sum_to_one():
    settings = Settings(API_KEY="x")
    assert sum(settings.weights.values()) == pytest.approx(1.0)
    assert set(settings.weights) == {"skill", "availability", "location", "performance", "workload"}


def test_rejects_weights_not_summing_to_one():
    with pytest.raises(ValidationError):
        Settings(API_KEY="x", WEIGHT_SKILL=0.5)


def test_custom_weights_accepted():
    settings = Settings(API_KEY="x", WEIGHT_SKILL=0.4, WEIGHT_WORKLOAD=0.0)
    assert settings.weights["skill"] == 0.4
