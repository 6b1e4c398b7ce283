# spatial_softmax_loss/src/spatial_softmax_loss/backend.py
"""
Dizi (array) arka ucunu seçer. CPU'da NumPy, GPU'da CuPy kullanılır.
Tüm çekirdekler `xp` adıyla bu modüllerden birini alır.
"""
import importlib
import logging
from types import ModuleType
from typing import Any

import numpy as np

from .errors import LossConfigurationError

logger = logging.getLogger(__name__)


def get_backend(device: str = "cpu") -> ModuleType:
    """Cihaz adına göre dizi modülünü döndürür ('cpu' -> numpy, 'gpu' -> cupy)."""
    if device == "cpu":
        return np
    if device == "gpu":
        try:
            cupy = importlib.import_module("cupy")
        except ImportError as e:
            raise LossConfigurationError(
                "device='gpu' requires the 'cupy' package (pip install spatial-softmax-loss[gpu])."
            ) from e
        logger.info(f"GPU backend selected: cupy {cupy.__version__}")
        return cupy
    raise LossConfigurationError(f"Unknown device '{device}'. Expected 'cpu' or 'gpu'.")


def array_module(arr: Any) -> ModuleType:
    """Verilen dizinin ait olduğu modülü (numpy veya cupy) döndürür."""
    if type(arr).__module__.split(".")[0] == "cupy":
        return importlib.import_module("cupy")
    return np


def to_cpu(arr: Any) -> np.ndarray:
    """Diziyi her durumda bir NumPy dizisi olarak döndürür."""
    if type(arr).__module__.split(".")[0] == "cupy":
        return arr.get()
    return np.asarray(arr)
