# spatial_softmax_loss/src/spatial_softmax_loss/errors.py
"""Paket genelinde kullanılan hata tipleri."""


class LossConfigurationError(RuntimeError):
    """
    Yapısal olarak geçersiz bir çağrıyı bildiren ölümcül hata.
    Örn: 1024'ten fazla sınıfla frekans ağırlıklandırma, etiket girdisine gradyan
    istenmesi ya da etiket sayısının (outer * inner) ile uyuşmaması.
    Paket içinde hiçbir yerde yakalanmaz; çağıran taraf bu durumları hiç oluşturmamalıdır.
    """
