"""OTUI, Lua and module descriptor generation."""

from .otui import OTUICodeGenerator, format_translation, generate
from .lua import generate_lua, generate_manifest

__all__ = ["OTUICodeGenerator", "format_translation", "generate", "generate_lua", "generate_manifest"]
