# spatial_softmax_loss/src/spatial_softmax_loss/layers/softmax_with_loss.py
"""
Softmax ve konum başı çapraz entropiyi birleştiren kayıp katmanı.
Girdi ham skorlardır; gradyan doğrudan skorlara göre (p - onehot) hesaplanır,
bu yüzden softmax'in kendi geri geçişi kullanılmaz.
"""
import logging
from typing import Any, Dict, Optional, Tuple, Union

from ..config import SoftmaxLossConfig
from ..errors import LossConfigurationError
from ..losses import ForwardResult, LossGeometry, SpatialCrossEntropyLoss
from ..scratch import ScratchBuffer
from ..tensor import Tensor
from .base import Layer
from .softmax import softmax


class SoftmaxWithLoss(Layer):
    def __init__(self, config: Union[SoftmaxLossConfig, Dict[str, Any], None] = None):
        super().__init__()
        self.logger = logging.getLogger(self.__class__.__name__)
        self.criterion = SpatialCrossEntropyLoss(config)
        self.config = self.criterion.config
        self.geometry: Optional[LossGeometry] = None
        self.last_result: Optional[ForwardResult] = None
        self._grad_scratch = ScratchBuffer(self.criterion.xp.float32, self.config.device, name="score_gradient")
        self.logger.info(
            f"SoftmaxWithLoss initialized (axis={self.config.axis}, ignore_label={self.config.ignore_label}, "
            f"normalization={self.config.normalization_mode.value}, "
            f"weight_by_label_freqs={self.config.weight_by_label_freqs}, device={self.config.device})."
        )

    def reshape(self, scores: Tensor, labels: Tensor) -> LossGeometry:
        """Girdi geometrisini hesaplar ve ön koşulları kontrol eder."""
        geom = self.criterion.geometry(scores.shape, labels.count())
        if geom != self.geometry:
            self.logger.info(f"Loss geometry: outer={geom.outer_num}, channels={geom.channels}, inner={geom.inner_num}")
            self.geometry = geom
        return geom

    def forward(self, scores: Tensor, labels: Tensor, return_prob: bool = False) -> Union[Tensor, Tuple[Tensor, Tensor]]:
        self.reshape(scores, labels)
        xp = self.criterion.xp

        prob_data = softmax(xp.asarray(scores.data), axis=self.config.axis)
        result = self.criterion.forward(prob_data, labels.data)
        self.last_result = result
        # Histogram geçici tamponda durur; sonraki ileri geçiş üzerine yazar.
        histogram = None if result.histogram is None else result.histogram.copy()

        out = Tensor(xp.asarray(result.loss, dtype=prob_data.dtype), _children=(scores, labels), _op="SoftmaxWithLoss")

        def _backward():
            if labels.requires_grad:
                raise LossConfigurationError(f"{self.__class__.__name__} cannot backpropagate to label inputs.")
            if not scores.requires_grad or scores.grad is None:
                return
            grad = self._grad_scratch.borrow(prob_data.size, prob_data.dtype).reshape(prob_data.shape)
            self.criterion.backward(
                prob_data, labels.data,
                upstream_loss_weight=float(out.grad),
                histogram=histogram,
                grad=grad,
            )
            scores.grad += grad

        out._backward = _backward

        if return_prob:
            return out, Tensor(result.prob, _op="softmax")
        return out
