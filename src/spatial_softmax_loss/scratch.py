# spatial_softmax_loss/src/spatial_softmax_loss/scratch.py
import logging
from typing import Any, Optional

from .backend import get_backend


class ScratchBuffer:
    """
    Tek bir çağrı süresince ödünç verilen geçici tampon.
    Bir kez ayrılır ve sonraki çağrılarda yeniden kullanılır; yalnızca daha büyük
    bir boyut ya da farklı bir dtype istendiğinde yeniden ayrılır.
    İçeriğin çağrılar arasında korunduğu varsayılmamalıdır.
    """
    def __init__(self, dtype: Any, device: str = "cpu", name: str = "scratch"):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.xp = get_backend(device)
        self.dtype = self.xp.dtype(dtype)
        self.name = name
        self._storage: Optional[Any] = None

    @property
    def capacity(self) -> int:
        return 0 if self._storage is None else int(self._storage.shape[0])

    def borrow(self, size: int, dtype: Any = None):
        """İlk `size` elemanlık bir görünüm (view) döndürür."""
        dtype = self.dtype if dtype is None else self.xp.dtype(dtype)
        if size > self.capacity or dtype != self.dtype:
            self.logger.debug(f"Allocating '{self.name}': {size} x {dtype} (was {self.capacity} x {self.dtype}).")
            self._storage = self.xp.empty(max(size, self.capacity if dtype == self.dtype else 0), dtype=dtype)
            self.dtype = dtype
        return self._storage[:size]
