"""WooCommerce Subscriptions REST API integration."""

import logging
from datetime import UTC

import requests
from django.utils.dateparse import parse_datetime

from freya_omnisend.subscriptions.backends import LineItem, Product, Subscription
from freya_omnisend.subscriptions.exceptions import SubscriptionStoreError

from .base import BaseBackend

logger = logging.getLogger(__name__)

# Product field holding the Freya classification ("glp-1", "vitality", "misc")
PRODUCT_TYPE_FIELD = "freya_product_type"

# Largest page the WooCommerce REST API accepts
MAX_PER_PAGE = 100


def subscription_from_payload(data: dict) -> Subscription:
    """Build a subscription from a WooCommerce REST API representation."""
    created_at = parse_datetime(data.get("date_created_gmt") or data.get("date_created") or "")
    if created_at is not None and created_at.tzinfo is None:
        # WooCommerce returns "_gmt" dates without offset
        created_at = created_at.replace(tzinfo=UTC)
    return Subscription(
        id=data["id"],
        billing_email=(data.get("billing") or {}).get("email") or "",
        status=data.get("status", ""),
        created_at=created_at,
        items=[
            LineItem(id=item.get("id"), product_id=item.get("product_id") or None, name=item.get("name", ""))
            for item in data.get("line_items") or []
        ],
    )


def product_from_payload(data: dict) -> Product:
    """Build a product, reading its classification from ACF or from its meta data."""
    acf = data.get("acf") or {}
    product_type = acf.get(PRODUCT_TYPE_FIELD) if isinstance(acf, dict) else None
    if isinstance(product_type, dict):
        # ACF select fields returning both value and label
        product_type = product_type.get("value")
    if not product_type:
        product_type = next(
            (meta.get("value") for meta in data.get("meta_data") or [] if meta.get("key") == PRODUCT_TYPE_FIELD),
            None,
        )
    return Product(id=data["id"], product_type=product_type or None)


class WooCommerceBackend(BaseBackend):
    """Subscription store reading a WooCommerce shop through its REST API."""

    def __init__(self, url: str, consumer_key: str, consumer_secret: str, timeout: int = 30):
        """Configure the WooCommerce backend."""
        self.api_url = f"{url.rstrip('/')}/wp-json/wc/v3"
        self._auth = (consumer_key, consumer_secret)
        self._timeout = timeout

    def _get(self, path, params=None, allow_missing=False):
        """Call the REST API, returning None on 404 when allow_missing is set."""
        try:
            response = requests.get(
                f"{self.api_url}/{path}",
                params=params,
                auth=self._auth,
                timeout=self._timeout,
            )
            if allow_missing and response.status_code == requests.codes.not_found:
                return None
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as err:
            raise SubscriptionStoreError(f"WooCommerce request to {path!r} failed") from err

    def get_subscription(self, subscription_id):
        """Return a subscription, None if it does not exist."""
        data = self._get(f"subscriptions/{subscription_id}", allow_missing=True)
        return subscription_from_payload(data) if data else None

    def list_subscriptions(self, customer=None, statuses=None, offset=0, per_page=None, order="asc"):
        """
        List subscriptions ordered by start date.

        The REST API can not filter on the billing email, the customer email is
        used as a search term and the results are filtered afterwards.
        """
        params = {"orderby": "date", "order": order}
        if statuses is not None:
            params["status"] = ",".join(statuses)
        if customer is not None:
            params["search"] = customer

        if per_page is not None:
            subscriptions = self._list_page(params, offset, per_page)
        else:
            subscriptions = []
            while True:
                page = self._list_page(params, offset, MAX_PER_PAGE)
                subscriptions.extend(page)
                if len(page) < MAX_PER_PAGE:
                    break
                offset += MAX_PER_PAGE

        if customer is not None:
            subscriptions = [s for s in subscriptions if s.billing_email.lower() == customer.lower()]
        return subscriptions

    def _list_page(self, params, offset, per_page):
        data = self._get("subscriptions", params={**params, "offset": offset, "per_page": per_page})
        return [subscription_from_payload(item) for item in data]

    def get_product(self, product_id):
        """Return a product, None if it does not exist."""
        data = self._get(f"products/{product_id}", allow_missing=True)
        return product_from_payload(data) if data else None
