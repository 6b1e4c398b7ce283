# Bu dosya, tüm katmanları tek bir yerden kolayca import etmeyi sağlar.
from .base import Layer
from .softmax import Softmax, softmax
from .softmax_with_loss import SoftmaxWithLoss

__all__ = ["Layer", "Softmax", "softmax", "SoftmaxWithLoss"]
