import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from ..backend import get_backend
from ..config import SoftmaxLossConfig, build_config
from ..errors import LossConfigurationError
from ..kernels import (
    LocationPass,
    build_label_histogram,
    check_histogram_capacity,
    evaluate_locations,
    reduce_loss,
    resolve_normalizer,
    scale_gradient,
)
from ..scratch import ScratchBuffer
from .base import Loss


@dataclass(frozen=True)
class LossGeometry:
    """Olasılık tensörünün [outer, channels, inner] görünümü."""
    outer_num: int
    channels: int
    inner_num: int

    @property
    def num_locations(self) -> int:
        return self.outer_num * self.inner_num

    @classmethod
    def from_shape(cls, shape: Tuple[int, ...], axis: int) -> "LossGeometry":
        ndim = len(shape)
        if not -ndim <= axis < ndim:
            raise LossConfigurationError(f"Class axis {axis} is out of range for a {ndim}D probability tensor.")
        axis = axis % ndim
        return cls(
            outer_num=int(np.prod(shape[:axis], dtype=np.int64)),
            channels=int(shape[axis]),
            inner_num=int(np.prod(shape[axis + 1:], dtype=np.int64)),
        )


@dataclass
class ForwardResult:
    loss: float
    prob: Any                   # girdi olasılıkları, değiştirilmeden geçirilir
    histogram: Optional[Any]    # yalnızca ağırlıklandırma açıkken; sonraki ileri geçişte üzerine yazılır
    valid_count: float
    normalizer: float


class SpatialCrossEntropyLoss(Loss):
    """
    Olasılıklar üzerinde konum başı (piksel başı) çapraz entropi kaybı.
    Girdi [outer, channels, inner] olarak yorumlanır; her (n, s) konumu bağımsızdır.
    Opsiyonel olarak yok sayma etiketi ve ters sınıf frekansı ile ağırlıklandırma destekler.

    Ara sonuçlar (konum başı kayıp, geçerlilik bayrakları, histogram) bu nesnenin sahip
    olduğu geçici tamponlara yazılır; yeni bir çağrı öncekinin içeriğini geçersiz kılar.
    """
    def __init__(self, config: Union[SoftmaxLossConfig, Dict[str, Any], None] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config if isinstance(config, SoftmaxLossConfig) else build_config(config)
        self.xp = get_backend(self.config.device)
        self._loss_scratch = ScratchBuffer(np.float32, self.config.device, name="per_location_loss")
        self._valid_scratch = ScratchBuffer(np.int64, self.config.device, name="validity")
        self._histogram_scratch = ScratchBuffer(np.int64, self.config.device, name="label_histogram")

    def geometry(self, prob_shape: Tuple[int, ...], label_count: int) -> LossGeometry:
        """Tüm ön koşulları, hiçbir dizi işi başlamadan önce kontrol eder."""
        geom = LossGeometry.from_shape(tuple(prob_shape), self.config.axis)
        if geom.num_locations != label_count:
            raise LossConfigurationError(
                f"Number of labels must match number of predictions: outer_num * inner_num = "
                f"{geom.outer_num} * {geom.inner_num} = {geom.num_locations}, label count = {label_count}."
            )
        if self.config.weight_by_label_freqs:
            check_histogram_capacity(geom.channels)
        return geom

    def _views(self, prob: Any, labels: Any) -> Tuple[LossGeometry, Any, Any, Any]:
        prob = self.xp.ascontiguousarray(self.xp.asarray(prob))
        labels = self.xp.asarray(labels)
        geom = self.geometry(prob.shape, int(labels.size))
        prob3 = prob.reshape(geom.outer_num, geom.channels, geom.inner_num)
        labels2 = labels.reshape(geom.outer_num, geom.inner_num)
        return geom, prob, prob3, labels2

    def histogram(self, labels: Any, channels: int) -> Any:
        """Geçerli batch için etiket histogramını (yeniden) oluşturur."""
        bins = self._histogram_scratch.borrow(channels)
        bins[...] = 0
        return build_label_histogram(
            labels, bins, channels,
            ignore_label=self.config.ignore_label,
            work_group_size=self.config.work_group_size,
        )

    def forward(self, prob: Any, labels: Any) -> ForwardResult:
        geom, prob, prob3, labels2 = self._views(prob, labels)

        histogram = self.histogram(labels2, geom.channels) if self.config.weight_by_label_freqs else None

        losses = self._loss_scratch.borrow(geom.num_locations, prob.dtype)
        validity = self._valid_scratch.borrow(geom.num_locations)
        evaluate_locations(LocationPass.FORWARD, prob3, labels2, self.config, histogram, losses, validity)

        normalizer = resolve_normalizer(self.config.normalization_mode, geom.outer_num, geom.inner_num, validity)
        loss = reduce_loss(losses, normalizer)
        valid_count = float(int(validity.sum()))

        self.logger.debug(f"forward: valid={valid_count:.0f}/{geom.num_locations}, normalizer={normalizer}, loss={loss:.6f}")
        return ForwardResult(loss=loss, prob=prob, histogram=histogram, valid_count=valid_count, normalizer=normalizer)

    def backward(self, prob: Any, labels: Any, upstream_loss_weight: float = 1.0,
                 propagate_down: Sequence[bool] = (True, False),
                 histogram: Optional[Any] = None, grad: Optional[Any] = None) -> Optional[Any]:
        """
        Kaybın softmax öncesi girdiye göre gradyanını `grad` tamponuna yazar ve döndürür.
        `grad` verilmezse yeni bir tampon ayrılır; verilirse olasılıklarla aynı şekilde ve
        bitişik (C-contiguous) olmalıdır, içeriği tamamen üzerine yazılır.
        """
        if len(propagate_down) > 1 and propagate_down[1]:
            raise LossConfigurationError(f"{self.__class__.__name__} cannot backpropagate to label inputs.")
        if not propagate_down[0]:
            return None

        geom, prob, prob3, labels2 = self._views(prob, labels)

        if grad is None:
            grad = self.xp.empty_like(prob)
        elif tuple(grad.shape) != tuple(prob.shape) or not grad.flags.c_contiguous:
            raise ValueError(f"Gradient buffer must be C-contiguous with shape {prob.shape}, got {grad.shape}.")
        grad3 = grad.reshape(geom.outer_num, geom.channels, geom.inner_num)

        if self.config.weight_by_label_freqs and histogram is None:
            histogram = self.histogram(labels2, geom.channels)

        validity = self._valid_scratch.borrow(geom.num_locations)
        evaluate_locations(LocationPass.BACKWARD, prob3, labels2, self.config, histogram, grad3, validity)

        normalizer = resolve_normalizer(self.config.normalization_mode, geom.outer_num, geom.inner_num, validity)
        scale_gradient(grad, upstream_loss_weight, normalizer)

        self.logger.debug(f"backward: normalizer={normalizer}, loss_weight={upstream_loss_weight}")
        return grad
