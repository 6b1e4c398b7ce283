# spatial_softmax_loss/src/spatial_softmax_loss/__init__.py
"""
Piksel başı (spatial) softmax çapraz entropi kaybı.
Yok sayma etiketi ve ters sınıf frekansı ile ağırlıklandırma desteği içerir.
"""
from .errors import LossConfigurationError
from .config import NormalizationMode, SoftmaxLossConfig, build_config
from .tensor import Tensor
from .scratch import ScratchBuffer
from .kernels import MAX_HISTOGRAM_BINS, build_label_histogram, label_histogram
from .losses import Loss, ForwardResult, LossGeometry, SpatialCrossEntropyLoss
from .layers import Layer, Softmax, SoftmaxWithLoss, softmax


__all__ = [
    "LossConfigurationError",
    "NormalizationMode", "SoftmaxLossConfig", "build_config",
    "Tensor", "ScratchBuffer",
    "MAX_HISTOGRAM_BINS", "build_label_histogram", "label_histogram",
    "Loss", "ForwardResult", "LossGeometry", "SpatialCrossEntropyLoss",
    "Layer", "Softmax", "SoftmaxWithLoss", "softmax",
]
