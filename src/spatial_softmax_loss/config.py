# spatial_softmax_loss/src/spatial_softmax_loss/config.py
"""
Kayıp katmanının değişmez (immutable) konfigürasyonu.
Her işlem bu değeri açıkça parametre olarak alır; katman içinde gizli bir durum tutulmaz.
"""
import logging
from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class NormalizationMode(str, Enum):
    """Toplam kaybın hangi paydaya bölüneceğini belirler."""
    VALID = "valid"            # yok sayılmayan konum sayısı
    BATCH_SIZE = "batch_size"  # outer (örnek sayısı)
    FULL = "full"              # outer * inner
    NONE = "none"              # bölme yok


class SoftmaxLossConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    ignore_label: Optional[int] = None
    normalize: bool = True
    normalization: Optional[NormalizationMode] = None
    weight_by_label_freqs: bool = False
    axis: int = 1
    device: Literal["cpu", "gpu"] = "cpu"
    work_group_size: int = Field(default=256, gt=0)

    @property
    def has_ignore_label(self) -> bool:
        return self.ignore_label is not None

    @property
    def normalization_mode(self) -> NormalizationMode:
        """Açık `normalization` alanı varsa onu, yoksa `normalize` bayrağının karşılığını döndürür."""
        if self.normalization is not None:
            return self.normalization
        return NormalizationMode.VALID if self.normalize else NormalizationMode.BATCH_SIZE


def build_config(raw: Optional[Dict[str, Any]] = None) -> SoftmaxLossConfig:
    """Ham sözlüğü Pydantic modeline göre doğrular; bilinmeyen anahtarlar atlanır."""
    raw = raw or {}
    try:
        model_fields = SoftmaxLossConfig.model_fields.keys()
        config_for_validation = {k: v for k, v in raw.items() if k in model_fields}
        skipped = sorted(set(raw) - set(config_for_validation))
        if skipped:
            logger.info(f"Ignoring unknown loss config keys: {skipped}")
        return SoftmaxLossConfig(**config_for_validation)
    except ValidationError as e:
        logger.error(f"Pydantic config validation failed: {e}", exc_info=True)
        error_details = "\n".join([f"  - Field '{err['loc'][0]}': {err['msg']}" for err in e.errors()])
        raise ValueError(f"Invalid configuration for SoftmaxLossConfig:\n{error_details}") from e
