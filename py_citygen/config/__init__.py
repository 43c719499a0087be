"""
Configuration modules for city generation.
"""

from .config import Settings, settings
from .generation_settings import GenerationSettings, generation_settings

__all__ = ['Settings', 'settings', 'GenerationSettings', 'generation_settings']
