from dtsbundle.bundle import bundle
from dtsbundle.consts import VERSION as __version__
from dtsbundle.models import BundleResult
from dtsbundle.settings import BundleSettings, NewlineStyle, load_settings

__all__ = [
    "BundleResult",
    "BundleSettings",
    "NewlineStyle",
    "bundle",
    "load_settings",
]
