"""Tests for StoreOptions and how Store applies them."""

import pytest
from pydantic import ValidationError

from lazykv import JsonCodec, PropertiesCodec, Store, StoreOptions, UnknownFormatError


def test_defaults():
    options = StoreOptions()
    assert options.quiescence_window == 1.0
    assert options.retained_versions == 0
    assert options.format == "json"
    assert options.create_if_missing is False


@pytest.mark.parametrize(
    "field,value",
    [("quiescence_window", -1), ("retained_versions", -2)],
)
def test_negative_values_rejected(field, value):
    with pytest.raises(ValidationError):
        StoreOptions(**{field: value})


def test_unknown_field_rejected():
    with pytest.raises(ValidationError):
        StoreOptions(ttl=5)


def test_validate_from_dict():
    options = StoreOptions.model_validate({"retained_versions": 3, "format": "properties"})
    assert options.retained_versions == 3
    assert options.format == "properties"


def test_store_accepts_keyword_overrides():
    store = Store(retained_versions=2)
    assert store.options.retained_versions == 2
    assert isinstance(store.codec, JsonCodec)


def test_store_overrides_apply_on_top_of_options():
    base = StoreOptions(quiescence_window=5, format="properties")
    store = Store(base, create_if_missing=True)
    assert store.options.quiescence_window == 5
    assert store.options.create_if_missing is True
    assert isinstance(store.codec, PropertiesCodec)


def test_store_overrides_are_validated():
    with pytest.raises(ValidationError):
        Store(StoreOptions(), retained_versions=-1)


def test_store_unknown_format():
    with pytest.raises(UnknownFormatError):
        Store(format="yaml")


def test_explicit_codec_wins():
    codec = PropertiesCodec()
    store = Store(codec=codec)
    assert store.codec is codec
