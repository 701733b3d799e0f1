"""Synchronize form submissions and WooCommerce subscriptions with Omnisend."""
