"""Codec registry for resolving ``StoreOptions.format`` names.

Uses the Registry pattern to map format strings to codec classes,
allowing extensibility without modifying store code.
"""

from __future__ import annotations

from typing import ClassVar

from lazykv.codecs.base import Codec
from lazykv.codecs.json_codec import JsonCodec
from lazykv.codecs.properties import PropertiesCodec
from lazykv.exceptions import UnknownFormatError


class CodecRegistry:
    """Creates codec instances from format names.

    Formats are registered at class level and can be extended via the
    `register` class method.

    Example:
        codec = CodecRegistry.create("properties")
        CodecRegistry.register("yaml", MyYamlCodec)
    """

    # Class-level registry mapping format strings to codec classes
    _registry: ClassVar[dict[str, type[Codec]]] = {
        "json": JsonCodec,
        "properties": PropertiesCodec,
    }

    @classmethod
    def register(cls, name: str, codec_class: type[Codec]) -> None:
        """Register a custom codec.

        Args:
            name: Format string to use in ``StoreOptions.format``
            codec_class: Codec class, instantiated without arguments

        Raises:
            ValueError: If codec_class.format_name doesn't match name
        """
        declared = codec_class.format_name
        if declared != "base" and declared != name:
            raise ValueError(
                f"Codec {codec_class.__name__} has format_name='{declared}' "
                f"but is being registered as '{name}'"
            )
        cls._registry[name] = codec_class

    @classmethod
    def unregister(cls, name: str) -> None:
        """Remove a registered format.  No-op if it is not registered."""
        cls._registry.pop(name, None)

    @classmethod
    def registered_formats(cls) -> list[str]:
        """Return list of registered format names."""
        return list(cls._registry.keys())

    @classmethod
    def create(cls, name: str) -> Codec:
        """Instantiate the codec registered under *name*.

        Raises:
            UnknownFormatError: If no codec is registered under *name*
        """
        codec_class = cls._registry.get(name)
        if codec_class is None:
            raise UnknownFormatError(name, cls.registered_formats())
        return codec_class()
