"""Product type of a subscription, used to name the contact status property."""

import logging

from freya_omnisend.subscriptions.exceptions import SubscriptionStoreError

logger = logging.getLogger(__name__)

SUBSCRIPTION_STATUS_PROPERTY = "woocommerce_subscription_status"

DEFAULT_PRODUCT_TYPE = "glp-1"


def format_product_type(product_type):
    """Normalize a raw product type: "glp-1" gives "glp_1", "vitality" gives "nad"."""
    return product_type.replace("-", "_").replace("vitality", "nad")


def get_subscription_product_type(subscription, store):
    """
    Return the formatted product type of the first product of a subscription.

    Products without classification fall back to "glp-1". An empty string is
    returned when there is no item or no product to look at.
    """
    if not subscription.items:
        logger.info("No items found in subscription %s", subscription.id)
        return ""

    first_item = subscription.items[0]
    if first_item.product_id is None:
        logger.info("No product found for first item of subscription %s", subscription.id)
        return ""

    try:
        product = store.get_product(first_item.product_id)
    except SubscriptionStoreError:
        logger.exception("Could not fetch product %s", first_item.product_id)
        return ""
    if product is None:
        logger.info("Product %s of subscription %s does not exist", first_item.product_id, subscription.id)
        return ""

    product_type = product.product_type
    if not isinstance(product_type, str) or not product_type:
        logger.info("No product type found for product %s, falling back to %s", product.id, DEFAULT_PRODUCT_TYPE)
        product_type = DEFAULT_PRODUCT_TYPE

    return format_product_type(product_type)


def get_property_name(product_type):
    """Return the contact property holding the subscription status for a product type."""
    if not product_type:
        return SUBSCRIPTION_STATUS_PROPERTY
    return f"{SUBSCRIPTION_STATUS_PROPERTY}_{product_type}"
