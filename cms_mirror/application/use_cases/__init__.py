"""
Casos de uso de la aplicacion.
"""
from .mirror_use_cases import MirrorUseCases

__all__ = ["MirrorUseCases"]
