# spatial_softmax_loss/src/spatial_softmax_loss/tensor.py
"""
Veri ve gradyan tamponunu birlikte tutan tensör nesnesi.
Katmanlar çıktılarına bir `_backward` kapanışı (closure) bağlar; `backward()`
grafiği ters topolojik sırada dolaşarak bu kapanışları çağırır.
"""
from typing import Any, Callable, List, Optional, Tuple

import numpy as np

from .backend import array_module, to_cpu


class Tensor:
    def __init__(self, data: Any, _children: Tuple["Tensor", ...] = (), _op: str = "", requires_grad: bool = False):
        xp = array_module(data)
        self.data = xp.asarray(data)
        self.requires_grad = requires_grad
        self.grad = xp.zeros(self.data.shape, dtype=self._grad_dtype()) if requires_grad else None
        self._backward: Callable[[], None] = lambda: None
        self._prev = tuple(_children)
        self._op = _op

    def _grad_dtype(self):
        return self.data.dtype if np.issubdtype(self.data.dtype, np.floating) else np.float64

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self.data.shape)

    @property
    def ndim(self) -> int:
        return self.data.ndim

    def count(self, start: int = 0, end: Optional[int] = None) -> int:
        """[start, end) eksenlerinin boyutlarının çarpımını döndürür (boş aralık için 1)."""
        end = self.ndim if end is None else end
        return int(np.prod(self.shape[start:end], dtype=np.int64))

    def zero_grad(self) -> None:
        if self.grad is not None:
            self.grad[...] = 0

    def backward(self, grad: Any = None) -> None:
        """Bu tensörden başlayarak gradyanları geriye yayar. Tohum gradyan varsayılan olarak 1'dir."""
        topo: List[Tensor] = []
        visited = set()

        def build(node: "Tensor"):
            if id(node) in visited:
                return
            visited.add(id(node))
            for child in node._prev:
                build(child)
            topo.append(node)

        build(self)

        xp = array_module(self.data)
        if self.grad is None:
            self.grad = xp.zeros(self.data.shape, dtype=self._grad_dtype())
        self.grad[...] = 1.0 if grad is None else xp.asarray(grad)

        for node in reversed(topo):
            node._backward()

    def to_cpu(self) -> np.ndarray:
        return to_cpu(self.data)

    def item(self) -> float:
        return self.to_cpu().item()

    def __repr__(self) -> str:
        return f"Tensor(shape={self.shape}, op='{self._op}', requires_grad={self.requires_grad})"
