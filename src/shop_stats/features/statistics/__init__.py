"""Shop statistics API endpoints

This feature provides read-only statistics for the shop linked to the
authenticated shop owner: an order summary and top clients over a date
range, and per-product, per-category and year-over-year figures for a
calendar year.

All report handlers delegate to service functions that read the order
ledger through a ``StatisticsStore``, so the aggregation logic can be
tested without a database."""
