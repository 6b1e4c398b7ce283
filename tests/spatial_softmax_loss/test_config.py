import pytest
import numpy as np
from pydantic import ValidationError

from spatial_softmax_loss import (
    LossConfigurationError, NormalizationMode, ScratchBuffer, SoftmaxLossConfig, Tensor, build_config,
)
from spatial_softmax_loss.backend import get_backend

# --- Konfigürasyon Testleri ---

@pytest.mark.parametrize("raw, expected", [
    ({}, NormalizationMode.VALID),
    ({"normalize": True}, NormalizationMode.VALID),
    ({"normalize": False}, NormalizationMode.BATCH_SIZE),
    ({"normalize": False, "normalization": "full"}, NormalizationMode.FULL),
    ({"normalization": "none"}, NormalizationMode.NONE),
])
def test_normalization_mode_resolution(raw, expected):
    assert build_config(raw).normalization_mode is expected

def test_config_is_immutable():
    config = SoftmaxLossConfig(ignore_label=255)
    with pytest.raises(ValidationError):
        config.ignore_label = 0

def test_build_config_skips_unknown_keys():
    config = build_config({"ignore_label": 3, "loss_weight": 2.0})
    assert config.has_ignore_label
    assert config.ignore_label == 3

@pytest.mark.parametrize("raw", [
    {"work_group_size": 0},
    {"normalization": "per_pixel"},
    {"device": "tpu"},
])
def test_build_config_rejects_invalid_values(raw):
    with pytest.raises(ValueError, match="Invalid configuration"):
        build_config(raw)

def test_unknown_device_is_fatal():
    with pytest.raises(LossConfigurationError):
        get_backend("tpu")

# --- Geçici Tampon Testleri ---

def test_scratch_buffer_is_reused_until_it_must_grow():
    scratch = ScratchBuffer(np.float32)
    first = scratch.borrow(8)
    smaller = scratch.borrow(4)

    assert scratch.capacity == 8
    assert np.shares_memory(first, smaller)

    scratch.borrow(16)
    assert scratch.capacity == 16

def test_scratch_buffer_reallocates_on_dtype_change():
    scratch = ScratchBuffer(np.float32)
    scratch.borrow(8)
    view = scratch.borrow(4, np.float64)
    assert view.dtype == np.float64
    assert view.shape == (4,)

# --- Tensör Testleri ---

def test_tensor_count_over_axis_ranges():
    t = Tensor(np.zeros((2, 3, 4, 5)))
    assert t.count() == 120
    assert t.count(0, 1) == 2
    assert t.count(2) == 20
    assert t.count(1, 1) == 1

def test_tensor_allocates_float_grad_for_integer_data():
    t = Tensor(np.array([1, 2, 3]), requires_grad=True)
    assert t.grad.dtype == np.float64
    t.grad += 1.5
    t.zero_grad()
    assert np.all(t.grad == 0.0)
