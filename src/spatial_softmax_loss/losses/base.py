from typing import Any, Sequence


class Loss:
    """Tüm kayıp fonksiyonlarının miras alacağı soyut temel sınıf."""
    def forward(self, prob: Any, labels: Any) -> Any:
        """Kayıp fonksiyonunun ileri geçiş (forward pass) mantığını tanımlar."""
        raise NotImplementedError

    def backward(self, prob: Any, labels: Any, upstream_loss_weight: float = 1.0,
                 propagate_down: Sequence[bool] = (True, False), **kwargs) -> Any:
        """Kaybın girdiye göre gradyanını hesaplar."""
        raise NotImplementedError

    def __call__(self, prob: Any, labels: Any) -> float:
        return self.forward(prob, labels).loss
