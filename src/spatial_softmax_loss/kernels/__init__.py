# Bu dosya, vektörel çekirdekleri tek bir yerden kolayca import etmeyi sağlar.
from .histogram import MAX_HISTOGRAM_BINS, check_histogram_capacity, build_label_histogram, label_histogram
from .per_location import LocationPass, evaluate_locations
from .reduction import resolve_normalizer, reduce_loss, scale_gradient

__all__ = [
    "MAX_HISTOGRAM_BINS", "check_histogram_capacity", "build_label_histogram", "label_histogram",
    "LocationPass", "evaluate_locations",
    "resolve_normalizer", "reduce_loss", "scale_gradient",
]
