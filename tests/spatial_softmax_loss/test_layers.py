import logging

import pytest
import numpy as np

from spatial_softmax_loss import LossConfigurationError, Softmax, SoftmaxWithLoss, Tensor, softmax

IGNORE = -1

def _numerical_grad(fn, x, eps=1e-6):
    grad = np.zeros_like(x)
    for idx in np.ndindex(*x.shape):
        orig = x[idx]
        x[idx] = orig + eps
        plus = fn(x)
        x[idx] = orig - eps
        minus = fn(x)
        x[idx] = orig
        grad[idx] = (plus - minus) / (2 * eps)
    return grad

# --- Softmax Katmanı ---

def test_softmax_is_stable_and_normalized():
    x = np.array([[1000.0, 1001.0, 1002.0], [-5.0, 0.0, 5.0]])
    p = softmax(x, axis=1)
    assert np.all(np.isfinite(p))
    assert np.allclose(p.sum(axis=1), 1.0)

def test_softmax_layer_backward_matches_numerical_gradient():
    rng = np.random.default_rng(0)
    x_data = rng.normal(size=(2, 4, 3))
    weights = rng.normal(size=(2, 4, 3))

    x = Tensor(x_data.copy(), requires_grad=True)
    out = Softmax(axis=1)(x)
    out.backward(weights)

    numerical = _numerical_grad(lambda v: float(np.sum(softmax(v, axis=1) * weights)), x_data.copy())
    assert np.allclose(x.grad, numerical, atol=1e-6)

# --- SoftmaxWithLoss Katmanı ---

@pytest.mark.parametrize("config", [
    {},
    {"normalize": False},
    {"ignore_label": IGNORE},
    {"weight_by_label_freqs": True, "normalization": "full"},
    {"ignore_label": IGNORE, "weight_by_label_freqs": True},
])
def test_softmax_with_loss_gradient_matches_numerical(config):
    """Birleşik katmanın analitik gradyanının sonlu farklarla uyumlu olduğunu test eder."""
    rng = np.random.default_rng(1)
    scores_data = rng.normal(size=(2, 3, 2, 2))
    labels = np.array([[[0, 1], [2, IGNORE if "ignore_label" in config else 1]],
                       [[1, 1], [0, 2]]])

    layer = SoftmaxWithLoss(config)
    scores = Tensor(scores_data.copy(), requires_grad=True)
    loss = layer(scores, Tensor(labels))
    loss.backward()

    def loss_of(v):
        return SoftmaxWithLoss(config)(Tensor(v), Tensor(labels)).item()

    numerical = _numerical_grad(loss_of, scores_data.copy())
    assert np.allclose(scores.grad, numerical, atol=1e-6)

def test_upstream_loss_weight_scales_gradient():
    rng = np.random.default_rng(2)
    scores_data = rng.normal(size=(3, 4))
    labels = Tensor(np.array([0, 3, 1]))

    unit = Tensor(scores_data.copy(), requires_grad=True)
    SoftmaxWithLoss()(unit, labels).backward()

    weighted = Tensor(scores_data.copy(), requires_grad=True)
    SoftmaxWithLoss()(weighted, labels).backward(2.5)

    assert np.allclose(weighted.grad, 2.5 * unit.grad)

def test_return_prob_exposes_unreduced_probabilities():
    scores = Tensor(np.log(np.array([[0.7, 0.2, 0.1], [0.1, 0.1, 0.8]])))
    loss, prob = SoftmaxWithLoss({"normalize": False})(scores, Tensor(np.array([0, 2])), return_prob=True)

    assert prob.shape == (2, 3)
    assert np.allclose(prob.data, [[0.7, 0.2, 0.1], [0.1, 0.1, 0.8]])
    assert loss.item() == pytest.approx((-np.log(0.7) - np.log(0.8)) / 2)

def test_backward_into_labels_is_fatal():
    scores = Tensor(np.zeros((2, 3)), requires_grad=True)
    labels = Tensor(np.array([0.0, 1.0]), requires_grad=True)
    loss = SoftmaxWithLoss()(scores, labels)

    with pytest.raises(LossConfigurationError):
        loss.backward()
    assert np.all(scores.grad == 0.0)

def test_backward_skipped_when_scores_do_not_require_grad():
    scores = Tensor(np.zeros((2, 3)))
    loss = SoftmaxWithLoss()(scores, Tensor(np.array([0, 1])))
    loss.backward()
    assert scores.grad is None

def test_capacity_violation_in_layer():
    layer = SoftmaxWithLoss({"weight_by_label_freqs": True})
    scores = Tensor(np.zeros((1, 2000, 2)))
    with pytest.raises(LossConfigurationError):
        layer(scores, Tensor(np.zeros((1, 2), dtype=np.int64)))

def test_geometry_change_is_logged(caplog):
    layer = SoftmaxWithLoss()
    with caplog.at_level(logging.INFO, logger="SoftmaxWithLoss"):
        layer(Tensor(np.zeros((2, 3, 4))), Tensor(np.zeros((2, 4), dtype=np.int64)))
        layer(Tensor(np.zeros((2, 3, 4))), Tensor(np.zeros((2, 4), dtype=np.int64)))
        layer(Tensor(np.zeros((1, 3, 5))), Tensor(np.zeros((1, 5), dtype=np.int64)))

    geometry_logs = [r for r in caplog.records if "Loss geometry" in r.getMessage()]
    assert len(geometry_logs) == 2
    assert layer.geometry.inner_num == 5

def test_weighted_backward_uses_its_own_batch_histogram():
    """Araya giren ikinci bir ileri geçişin, ilk kaybın gradyanındaki sınıf sayımlarını değiştirmediğini test eder."""
    rng = np.random.default_rng(3)
    config = {"weight_by_label_freqs": True, "normalization": "none"}
    scores_a = rng.normal(size=(6, 3))
    labels_a = Tensor(np.array([0, 1, 1, 1, 2, 2]))
    labels_b = Tensor(np.array([2, 2, 2, 2, 2, 0]))

    layer = SoftmaxWithLoss(config)
    s = Tensor(scores_a.copy(), requires_grad=True)
    loss_a = layer(s, labels_a)
    layer(Tensor(rng.normal(size=(6, 3))), labels_b)
    loss_a.backward()

    ref = Tensor(scores_a.copy(), requires_grad=True)
    SoftmaxWithLoss(config)(ref, labels_a).backward()

    assert np.allclose(s.grad, ref.grad)
