from typing import List
from ..tensor import Tensor

class Layer:
    """Tüm katmanların miras alacağı soyut temel sınıf."""
    def forward(self, *inputs: Tensor) -> Tensor:
        """Katmanın ileri geçiş (forward pass) mantığını tanımlar."""
        raise NotImplementedError

    def parameters(self) -> List[Tensor]:
        """Katmanın eğitilebilir parametrelerini bir liste olarak döndürür."""
        return []

    def __call__(self, *inputs: Tensor, **kwargs):
        """Katmanın bir fonksiyon gibi çağrılabilmesini sağlar (örn: layer(x))."""
        return self.forward(*inputs, **kwargs)
