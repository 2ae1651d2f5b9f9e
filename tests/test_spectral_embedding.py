import math

import numpy as np
import pytest

from config.settings import EmbeddingSettings
from spe.analysis_layer.features import CHANNEL_ORDER
from spe.analysis_layer.spectral_embedding import (
    SpectralEmbedder,
    frequency_for_level,
    phase_shift,
)
from spe.data_layer.models import Account, EmbeddingParams, Scenario, Schedule


@pytest.fixture
def embedder(cycle_start):
    return SpectralEmbedder(EmbeddingSettings(), cycle_start=cycle_start)


def test_frequency_halves_per_level():
    assert frequency_for_level(4.0, 5) == 4.0
    assert frequency_for_level(4.0, 7) == 1.0
    assert frequency_for_level(4.0, 4) == 8.0


def test_phase_shift_origin():
    assert phase_shift(0.5, 0.5, 0, 28) == 0.0
    assert phase_shift(0.5, 0.5, 7, 28) == pytest.approx(math.pi / 2)


def test_default_layout(embedder, scenario):
    result = embedder.embed(scenario)
    assert len(result.embedding) == 64 * 3 + 32 * 3
    assert list(result.offsets) == CHANNEL_ORDER
    assert result.offsets["service_stop_time"] == (0, 64)
    assert result.offsets["agent_start_locations"] == (256, 288)
    assert result.meta["order"] == CHANNEL_ORDER
    assert result.meta["h3_levels"] == [5, 7, 9]
    assert result.meta["cycle_days"] == 28

    for name, (start, end) in result.offsets.items():
        assert result.embedding[start:end] == result.components[name]


def test_channels_have_unit_norm(embedder, scenario):
    result = embedder.embed(scenario)
    for name in ("service_stop_time", "service_window_start", "agents_available", "agent_start_locations"):
        norm = float(np.linalg.norm(result.components[name]))
        assert norm == pytest.approx(1.0, abs=1e-9)


def test_zero_amplitude_channel_stays_zero(embedder):
    scenario = Scenario(
        accounts=[Account(lat=10, lng=10, schedule=Schedule(type="WEEKLY", anchor="MON"))]
    )
    result = embedder.embed(scenario)
    # no agents, unpinned, no service window
    assert result.components["agent_start_locations"] == [0.0] * 32
    assert result.components["pinned_accounts"] == [0.0] * 32
    assert result.components["service_window_duration"] == [0.0] * 64


def test_inactive_accounts_contribute_nothing(embedder):
    scenario = Scenario(
        accounts=[
            Account(
                lat=10,
                lng=10,
                estimated_service_minutes=60,
                schedule=Schedule(type="NEVER"),
            )
        ]
    )
    result = embedder.embed(scenario)
    assert all(v == 0.0 for v in result.embedding)


def test_embedding_is_deterministic(embedder, scenario):
    first = embedder.embed(scenario)
    second = embedder.embed(scenario)
    assert first.embedding == second.embedding


def test_request_params_override_defaults(embedder, scenario):
    params = EmbeddingParams(res_service_stop_time=16, h3_levels=[9], cycle_days=14)
    result = embedder.embed(scenario.model_copy(update={"params": params}))
    assert result.offsets["service_stop_time"] == (0, 16)
    assert result.offsets["service_window_start"] == (16, 80)
    assert result.meta["h3_levels"] == [9]
    assert result.meta["cycle_days"] == 14
    assert result.meta["dims"]["service_stop_time"] == 16


def test_location_changes_embedding(embedder, scenario):
    moved = scenario.model_copy(
        update={"accounts": [a.model_copy(update={"lng": a.lng + 40}) for a in scenario.accounts]}
    )
    a = np.array(embedder.embed(scenario).components["service_stop_time"])
    b = np.array(embedder.embed(moved).components["service_stop_time"])
    assert not np.allclose(a, b)


def test_to_dict_offsets_are_lists(embedder, scenario):
    data = embedder.embed(scenario).to_dict()
    assert data["offsets"]["service_stop_time"] == [0, 64]
    assert set(data) == {"embedding", "components", "offsets", "meta"}


def test_rule_schedule_embedding_is_reproducible_without_cycle_start(cycle_start):
    scenario = Scenario(
        accounts=[
            Account(
                lat=48.85,
                lng=2.35,
                estimated_service_minutes=90,
                schedule=Schedule(rrule="FREQ=MONTHLY;BYMONTHDAY=1"),
            )
        ]
    )
    implicit = SpectralEmbedder(EmbeddingSettings()).embed(scenario)
    explicit = SpectralEmbedder(EmbeddingSettings(), cycle_start=cycle_start).embed(scenario)
    assert implicit.embedding == explicit.embedding
    assert any(v != 0.0 for v in implicit.components["service_stop_time"])
