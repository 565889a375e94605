"""
Yandex Delivery B2B cargo API client.

Provides async methods for:
- Estimating a courier delivery (creates a claim and reads its offer price)
- Reading claim info
- Accepting and cancelling claims

Every call is a single awaited request with no retry.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TAXI_CLASS = "express"
PARCEL_SIZE_M = 0.3
PARCEL_WEIGHT_KG = 3


@dataclass
class Contact:
    name: str
    phone: str

    def to_payload(self) -> dict:
        return {"name": self.name, "phone": self.phone}


@dataclass
class DeliveryEstimate:
    """Result of creating a claim for a price quote."""

    claim_id: str
    price: int  # whole tenge
    currency: str
    status: str


class YandexDeliveryError(Exception):
    """Base exception for Yandex Delivery API errors."""

    def __init__(
        self, message: str, status_code: int = None, response_data: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(message)


class YandexDeliveryNotConfigured(YandexDeliveryError):
    pass


def is_delivery_available() -> bool:
    return bool(get_settings().YANDEX_DELIVERY_TOKEN)


def parse_offer_price(claim: dict) -> tuple[int, str]:
    """Offer price (or final price) rounded to whole tenge, and its currency."""
    pricing = claim.get("pricing") or {}
    offer = pricing.get("offer") or {}
    raw = offer.get("price") or pricing.get("final_price")
    price = round(float(raw)) if raw else 0
    return price, offer.get("currency") or "KZT"


class YandexDeliveryClient:
    """Async client for the Yandex Delivery cargo claims API."""

    def __init__(self, token: str = None, base_url: str = None, timeout: float = 30.0):
        settings = get_settings()
        self.token = token or settings.YANDEX_DELIVERY_TOKEN
        if not self.token:
            raise YandexDeliveryNotConfigured("Yandex Delivery token not configured")
        self.base_url = (base_url or settings.YANDEX_DELIVERY_URL).rstrip("/")
        self.timeout = timeout
        self._headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "Accept-Language": "ru",
        }

    async def _request(
        self,
        method: str,
        path: str,
        params: dict = None,
        json_data: dict = None,
    ) -> dict:
        """Make an async request to the cargo API."""
        url = f"{self.base_url}{path}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._headers,
                    params=params,
                    json=json_data,
                )
        except httpx.HTTPError as e:
            raise YandexDeliveryError(f"Yandex API unreachable: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {"raw": response.text}

        if not response.is_success:
            logger.error(f"Yandex API error: {response.status_code} - {data}")
            message = data.get("message") or data.get("error") or str(data)
            raise YandexDeliveryError(
                message=f"Yandex API error ({response.status_code}): {message}",
                status_code=response.status_code,
                response_data=data,
            )

        return data

    # =========================================================================
    # Claims
    # =========================================================================

    def build_claim_body(
        self,
        pickup_address: str,
        pickup_coordinates: list[float],
        pickup_contact: Contact,
        dropoff_address: str,
        dropoff_contact: Contact,
        total_cost: int,
        dropoff_coordinates: Optional[list[float]] = None,
    ) -> dict:
        return {
            "client_requirements": {"taxi_class": DEFAULT_TAXI_CLASS},
            "items": [
                {
                    "extra_id": "order-items",
                    "pickup_point": 1,
                    "dropoff_point": 2,
                    "title": "Заказ",
                    "size": {
                        "length": PARCEL_SIZE_M,
                        "width": PARCEL_SIZE_M,
                        "height": PARCEL_SIZE_M,
                    },
                    "weight": PARCEL_WEIGHT_KG,
                    "cost_value": str(total_cost),
                    "cost_currency": "KZT",
                    "quantity": 1,
                }
            ],
            "route_points": [
                {
                    "point_id": 1,
                    "visit_order": 1,
                    "contact": pickup_contact.to_payload(),
                    "address": {
                        "fullname": pickup_address,
                        "coordinates": list(pickup_coordinates),
                    },
                    "type": "source",
                    "skip_confirmation": False,
                },
                {
                    "point_id": 2,
                    "visit_order": 2,
                    "contact": dropoff_contact.to_payload(),
                    "address": {
                        "fullname": dropoff_address,
                        "coordinates": list(dropoff_coordinates or [0, 0]),
                    },
                    "type": "destination",
                    "skip_confirmation": False,
                },
            ],
            "skip_act": True,
            "optional_return": False,
        }

    async def estimate(self, **claim_args) -> DeliveryEstimate:
        """
        Create a claim to get a courier price offer.

        Accepts the keyword arguments of ``build_claim_body``.
        """
        body = self.build_claim_body(**claim_args)
        claim = await self._request(
            "POST",
            "/claims/create",
            params={"request_id": str(uuid.uuid4())},
            json_data=body,
        )
        price, currency = parse_offer_price(claim)
        return DeliveryEstimate(
            claim_id=claim.get("id", ""),
            price=price,
            currency=currency,
            status=claim.get("status", ""),
        )

    async def get_claim_info(self, claim_id: str) -> dict:
        return await self._request(
            "POST", "/claims/info", params={"claim_id": claim_id}, json_data={}
        )

    async def accept_claim(self, claim_id: str, version: int) -> dict:
        return await self._request(
            "POST",
            "/claims/accept",
            params={"claim_id": claim_id},
            json_data={"version": version},
        )

    async def cancel_claim(
        self, claim_id: str, cancel_state: str = "free", version: int = 1
    ) -> dict:
        return await self._request(
            "POST",
            "/claims/cancel",
            params={"claim_id": claim_id},
            json_data={"cancel_state": cancel_state, "version": version},
        )