# spatial_softmax_loss/src/spatial_softmax_loss/kernels/histogram.py
"""
Etiket histogramı: bir batch'teki her sınıfın kaç konumda geçtiğini sayar.
Frekans ağırlıklandırma açıkken her ileri geçişte yeniden oluşturulur.
"""
from typing import Any, Optional

from ..backend import array_module
from ..errors import LossConfigurationError

# Histogramın sabit kapasitesi. Aşılması bir konfigürasyon hatasıdır; kırpılmaz.
MAX_HISTOGRAM_BINS = 1024


def check_histogram_capacity(num_classes: int) -> None:
    if num_classes > MAX_HISTOGRAM_BINS:
        raise LossConfigurationError(
            f"Label-frequency weighting supports at most {MAX_HISTOGRAM_BINS} classes, got {num_classes}."
        )


def build_label_histogram(
    labels: Any,
    bins: Any,
    num_classes: int,
    ignore_label: Optional[int] = None,
    work_group_size: int = 256,
) -> Any:
    """
    `bins[label[i]]` değerini her `i` için bir artırır. `bins` çağıran tarafından sıfırlanmış olmalıdır.

    Etiketler `work_group_size` uzunluğunda ardışık gruplara bölünür. Her grup kendi yerel
    histogramını çıkarır (tümü tek bir `bincount` ile, anahtar = grup * C + etiket),
    ardından yerel histogramlar tek bir toplama adımıyla global kutulara eklenir.
    Tamsayı toplama sıradan bağımsız olduğu için sonuç deterministiktir.

    Yok sayma etiketi ve [0, num_classes) dışındaki değerler sayılmaz; bu yüzden
    sum(bins) == labelsize yalnızca her etiket gerçek bir sınıf olduğunda geçerlidir,
    aksi halde toplam, sayılmayan eleman sayısı kadar eksiktir.
    """
    check_histogram_capacity(num_classes)
    xp = array_module(labels)

    flat = labels.reshape(-1).astype(xp.int64)
    counted = (flat >= 0) & (flat < num_classes)
    if ignore_label is not None:
        counted &= flat != ignore_label

    num_groups = max(1, -(-flat.shape[0] // work_group_size))
    group_ids = xp.arange(flat.shape[0], dtype=xp.int64) // work_group_size
    keys = group_ids[counted] * num_classes + flat[counted]

    local = xp.bincount(keys, minlength=num_groups * num_classes).reshape(num_groups, num_classes)
    bins[:num_classes] += local.sum(axis=0).astype(bins.dtype)
    return bins


def label_histogram(
    labels: Any,
    num_classes: int,
    ignore_label: Optional[int] = None,
    work_group_size: int = 256,
) -> Any:
    """Sıfırlanmış kutuları ayırır ve doldurulmuş histogramı döndürür."""
    check_histogram_capacity(num_classes)
    xp = array_module(labels)
    bins = xp.zeros(num_classes, dtype=xp.int64)
    return build_label_histogram(labels, bins, num_classes, ignore_label, work_group_size)
