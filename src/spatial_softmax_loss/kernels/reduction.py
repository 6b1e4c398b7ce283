# spatial_softmax_loss/src/spatial_softmax_loss/kernels/reduction.py
from typing import Any

from ..backend import array_module
from ..config import NormalizationMode


def resolve_normalizer(mode: NormalizationMode, outer_num: int, inner_num: int, validity: Any) -> float:
    """Kayıp toplamının bölüneceği paydayı döndürür; en az 1'dir."""
    if mode is NormalizationMode.VALID:
        normalizer = float(int(array_module(validity).count_nonzero(validity)))
    elif mode is NormalizationMode.BATCH_SIZE:
        normalizer = float(outer_num)
    elif mode is NormalizationMode.FULL:
        normalizer = float(outer_num * inner_num)
    else:
        normalizer = 1.0
    return max(1.0, normalizer)


def reduce_loss(losses: Any, normalizer: float) -> float:
    return float(array_module(losses).sum(losses)) / normalizer


def scale_gradient(grad: Any, upstream_loss_weight: float, normalizer: float) -> Any:
    """Tüm gradyan tamponunu tek bir skalerle ölçekler. İndirgeme tamamlandıktan sonra çağrılmalıdır."""
    grad *= upstream_loss_weight / normalizer
    return grad
