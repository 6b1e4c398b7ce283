from typing import Any

from ..backend import array_module
from ..tensor import Tensor
from .base import Layer


def softmax(x: Any, axis: int = 1) -> Any:
    """Sayısal stabilite için maksimumu çıkararak softmax hesaplar."""
    xp = array_module(x)
    shifted = x - xp.max(x, axis=axis, keepdims=True)
    exps = xp.exp(shifted)
    return exps / xp.sum(exps, axis=axis, keepdims=True)


class Softmax(Layer):
    """Ham skorları verilen eksen boyunca sınıf olasılıklarına dönüştürür."""
    def __init__(self, axis: int = 1):
        super().__init__()
        self.axis = axis

    def forward(self, x: Tensor) -> Tensor:
        prob = softmax(x.data, axis=self.axis)
        out = Tensor(prob, _children=(x,), _op="softmax", requires_grad=x.requires_grad)

        def _backward():
            if x.requires_grad and x.grad is not None:
                # dL/dx = p * (g - sum(g * p))
                xp = array_module(prob)
                dot = xp.sum(out.grad * prob, axis=self.axis, keepdims=True)
                x.grad += prob * (out.grad - dot)

        out._backward = _backward
        return out
