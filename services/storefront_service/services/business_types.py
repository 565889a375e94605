"""Business types and the catalog vocabulary each one uses.

A restaurant sells "блюда" from a "Меню", a salon sells "услуги". The labels
travel with the storefront payload so every client uses the same words.
"""

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class BusinessLabels:
    label: str
    group: str
    item_label: str
    item_label_plural: str
    category_label: str

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            "label": data["label"],
            "group": data["group"],
            "itemLabel": data["item_label"],
            "itemLabelPlural": data["item_label_plural"],
            "categoryLabel": data["category_label"],
        }


def _fnb(label: str, item: str = "блюдо") -> BusinessLabels:
    return BusinessLabels(label, "fnb", item, "Меню", "Раздел меню")


def _shop(label: str) -> BusinessLabels:
    return BusinessLabels(label, "ecommerce", "товар", "Товары", "Категория")


def _service(
    label: str, item: str = "услугу", category: str = "Категория услуг"
) -> BusinessLabels:
    return BusinessLabels(label, "service", item, "Услуги", category)


BUSINESS_TYPES: dict[str, BusinessLabels] = {
    # Food & beverage
    "restaurant": _fnb("Ресторан"),
    "cafe": _fnb("Кафе"),
    "home_food": _fnb("Домашняя еда"),
    "bakery": _fnb("Пекарня и кондитерская", item="изделие"),
    "catering": _fnb("Кейтеринг"),
    "hotel_restaurant": _fnb("Ресторан при отеле"),
    "grocery": BusinessLabels(
        "Продукты и мясо", "fnb", "товар", "Товары", "Категория"
    ),
    # Retail
    "ecommerce": _shop("Интернет-магазин"),
    "fashion": _shop("Одежда и обувь"),
    "pharmacy": _shop("Аптека и здоровье"),
    "electronics": _shop("Электроника и телефоны"),
    "digital": _shop("Цифровые товары"),
    "popup": _shop("Pop-up магазин"),
    "personal_shopping": _shop("Шоппинг-услуги"),
    "jewelry": _shop("Украшения и аксессуары"),
    "b2b": _shop("B2B и оптовая торговля"),
    # Services
    "salon": _service("Салон красоты"),
    "laundry": _service("Прачечная и химчистка"),
    "professional": _service("Профессиональные услуги"),
    "pets": _service("Зоотовары и груминг"),
    "hotel": _service("Бронирование жилья"),
    "education": _service("Образование и курсы", item="курс", category="Категория"),
    "printing": _service("Типография и печать"),
    "rental": _service("Аренда", category="Категория"),
    "travel": _service("Туризм и путешествия", item="тур", category="Категория"),
    "ticketing": _service(
        "Билеты и мероприятия", item="билет", category="Категория"
    ),
}

DEFAULT_LABELS = _shop("Магазин")


def get_business_labels(business_type: Optional[str]) -> BusinessLabels:
    """Labels for a business type; unknown or empty types get the generic shop."""
    return BUSINESS_TYPES.get(business_type or "", DEFAULT_LABELS)


def is_known_business_type(business_type: Optional[str]) -> bool:
    return business_type in BUSINESS_TYPES
