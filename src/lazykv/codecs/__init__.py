"""On-disk formats for store files."""

from lazykv.codecs.base import Codec
from lazykv.codecs.json_codec import JsonCodec
from lazykv.codecs.properties import PropertiesCodec
from lazykv.codecs.registry import CodecRegistry

__all__ = ["Codec", "CodecRegistry", "JsonCodec", "PropertiesCodec"]
