"""Production environment guard."""

import logging
from urllib.parse import urlparse

from django.conf import settings

from freya_omnisend.sync.exceptions import EnvironmentGuardError

logger = logging.getLogger(__name__)

DEFAULT_PRODUCTION_HOST = "freyameds.com"


def get_site_host():
    """Return the host of the public site URL, an empty string if unknown."""
    site_url = getattr(settings, "FREYA_OMNISEND_SITE_URL", None) or ""
    return urlparse(site_url).hostname or ""


def is_production_environment():
    """Tell whether this deployment is the production site, subdomains excluded."""
    production_host = getattr(settings, "FREYA_OMNISEND_PRODUCTION_HOST", DEFAULT_PRODUCTION_HOST)
    return get_site_host() == production_host


def check_environment(dry_run=False):
    """
    Refuse live changes outside of the production site.

    Dry runs are allowed anywhere since they never write to Omnisend.

    Raises:
        EnvironmentGuardError: If not on production and dry_run is not set

    """
    if is_production_environment():
        return
    if not dry_run:
        raise EnvironmentGuardError(
            f"Live changes are only allowed on the production site, current host is {get_site_host()!r}"
        )
    logger.warning("Running on %r in dry run mode", get_site_host())
