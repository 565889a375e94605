"""Unit tests for business type vocabulary."""

import pytest
from services.storefront_service.services.business_types import (
    BUSINESS_TYPES,
    get_business_labels,
    is_known_business_type,
)


@pytest.mark.unit
def test_restaurant_sells_dishes_from_a_menu():
    labels = get_business_labels("restaurant")

    assert labels.group == "fnb"
    assert labels.item_label == "блюдо"
    assert labels.item_label_plural == "Меню"


@pytest.mark.unit
def test_salon_sells_services():
    labels = get_business_labels("salon")

    assert labels.group == "service"
    assert labels.item_label_plural == "Услуги"


@pytest.mark.unit
def test_unknown_type_gets_generic_shop_labels():
    labels = get_business_labels("spaceport")

    assert labels.group == "ecommerce"
    assert labels.item_label == "товар"
    assert get_business_labels(None) == labels


@pytest.mark.unit
def test_to_dict_is_camel_case():
    data = get_business_labels("bakery").to_dict()

    assert data == {
        "label": "Пекарня и кондитерская",
        "group": "fnb",
        "itemLabel": "изделие",
        "itemLabelPlural": "Меню",
        "categoryLabel": "Раздел меню",
    }


@pytest.mark.unit
def test_known_types():
    assert is_known_business_type("grocery")
    assert not is_known_business_type("")
    assert not is_known_business_type(None)
    assert {labels.group for labels in BUSINESS_TYPES.values()} == {
        "fnb",
        "ecommerce",
        "service",
    }
