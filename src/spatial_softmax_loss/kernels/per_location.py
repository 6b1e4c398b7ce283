# spatial_softmax_loss/src/spatial_softmax_loss/kernels/per_location.py
"""
İleri ve geri geçişin paylaştığı konum başı (per-location) politika.
Yok sayma etiketi dalı ve sınıf ağırlıklandırma dalı yalnızca burada yazılır.
"""
from enum import Enum
from typing import Any, Optional

from ..backend import array_module
from ..config import SoftmaxLossConfig


class LocationPass(str, Enum):
    FORWARD = "forward"    # out: [outer * inner] konum başı kayıp
    BACKWARD = "backward"  # out: [outer, channels, inner] gradyan


def evaluate_locations(
    pass_: LocationPass,
    prob: Any,
    labels: Any,
    config: SoftmaxLossConfig,
    histogram: Optional[Any],
    out: Any,
    validity: Any,
) -> None:
    """
    `prob` [outer, channels, inner], `labels` [outer, inner] şeklindedir.
    Her konum için geçerlilik bayrağını `validity`'ye (1 = sayılır, 0 = yok sayıldı) yazar.

    FORWARD: out[n*inner + s] = -log(max(p[n, y, s], tiny)) / w
    BACKWARD: out[n, :, s] = (p[n, :, s] - onehot(y)) / w
    Yok sayılan konumlarda kayıp ve tüm gradyan dilimi sıfırdır. Ağırlıklandırma
    kapalıysa w = 1, açıksa w = histogram[y].
    """
    xp = array_module(prob)
    outer, _, inner = prob.shape

    label = labels.astype(xp.int64)
    if config.has_ignore_label:
        valid = label != config.ignore_label
        target = xp.where(valid, label, 0)
    else:
        valid = xp.ones(label.shape, dtype=bool)
        target = label

    scale = valid.astype(prob.dtype)
    if config.weight_by_label_freqs:
        # Hedef sınıfın sayımı > 0 olmalı; sayımı sıfır olan bir sınıf hiç hedef olamaz.
        counts = xp.where(valid, histogram[target], 1).astype(prob.dtype)
        scale = scale / counts

    validity[...] = valid.reshape(-1)

    n_idx = xp.arange(outer)[:, None]
    s_idx = xp.arange(inner)[None, :]

    if pass_ is LocationPass.FORWARD:
        tiny = xp.finfo(prob.dtype).tiny
        picked = xp.maximum(prob[n_idx, target, s_idx], tiny)
        out[...] = (-xp.log(picked) * scale).reshape(-1)
    else:
        out[...] = prob
        out[n_idx, target, s_idx] -= valid.astype(prob.dtype)
        out *= scale[:, None, :]
