# Bu dosya, tüm kayıp fonksiyonlarını tek bir yerden kolayca import etmeyi sağlar.
from .base import Loss
from .cross_entropy import ForwardResult, LossGeometry, SpatialCrossEntropyLoss

__all__ = ["Loss", "ForwardResult", "LossGeometry", "SpatialCrossEntropyLoss"]
