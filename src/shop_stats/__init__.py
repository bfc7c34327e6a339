"""Per-shop sales statistics API for a multi-tenant marketplace."""
