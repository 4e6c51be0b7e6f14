"""Utility functions."""

from rbac_admin.utils.context import (
    add_request_context,
    get_request_id,
    set_context_user,
)
from rbac_admin.utils.pagination import (
    Page,
    PageData,
    PageParams,
    Pagination,
    page_params,
    paginated,
)
from rbac_admin.utils.timezone import (
    UTC,
    to_iso8601,
    to_utc,
    utc_now,
)

__all__ = [
    # Context
    "add_request_context",
    "get_request_id",
    "set_context_user",
    # Pagination
    "Page",
    "PageData",
    "PageParams",
    "Pagination",
    "page_params",
    "paginated",
    # Timezone
    "UTC",
    "to_iso8601",
    "to_utc",
    "utc_now",
]
