# tests/test_forms.py
import pytest
from pydantic import ValidationError

from boutique.core import DEFAULT_IMAGE, ProductIn, ProductPatch, parse_option_values
from boutique.models import ProductOptions


def test_numbers_are_parsed_from_form_text():
    p = ProductIn.model_validate({"name": " Ring ", "price": "1200", "stock": " 3 "})
    assert (p.name, p.price, p.stock) == ("Ring", 1200, 3)


@pytest.mark.parametrize("field,value", [
    ("price", "abc"),
    ("price", "-1"),
    ("price", "3.5"),
    ("price", ""),
    ("price", True),
    ("stock", -2),
    ("stock", "ten"),
])
def test_bad_numbers_are_rejected(field, value):
    data = {"name": "Ring", "price": 1200, "stock": 3}
    data[field] = value
    with pytest.raises(ValidationError):
        ProductIn.model_validate(data)


def test_blank_name_is_rejected():
    with pytest.raises(ValidationError):
        ProductIn.model_validate({"name": "  ", "price": 1, "stock": 1})


def test_blank_optional_fields():
    p = ProductIn.model_validate({"name": "Ring", "price": 1, "stock": 1, "image": "", "detailUrl": ""})
    assert p.image == DEFAULT_IMAGE
    assert p.detail_url is None


def test_options_need_values():
    with pytest.raises(ValidationError):
        ProductIn.model_validate({"name": "Ring", "price": 1, "stock": 1,
                                  "options": {"label": "Size", "values": [" "]}})


def test_patch_only_reports_submitted_fields():
    assert ProductPatch.model_validate({"price": "5000"}).changes() == {"price": 5000}
    assert ProductPatch.model_validate({"price": None, "stock": 2}).changes() == {"stock": 2}
    assert ProductPatch.model_validate({"detailUrl": ""}).changes() == {"detail_url": None}


def test_patch_blank_image_resets_to_default():
    assert ProductPatch.model_validate({"image": "  "}).changes() == {"image": DEFAULT_IMAGE}
    assert ProductPatch.model_validate({"image": None}).changes() == {}


def test_patch_rejects_negative_stock():
    with pytest.raises(ValidationError):
        ProductPatch.model_validate({"stock": "-1"})


def test_parse_option_values():
    assert parse_option_values("", "16cm") is None
    assert parse_option_values("Size", "16cm, 18cm,,") == ProductOptions(label="Size", values=["16cm", "18cm"])
