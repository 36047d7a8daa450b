from .base import ProviderError, QuotaExceeded, RequestConfig, WeatherProvider
from .openmeteo import OpenMeteoProvider

__all__ = ["OpenMeteoProvider", "ProviderError", "QuotaExceeded", "RequestConfig", "WeatherProvider"]
