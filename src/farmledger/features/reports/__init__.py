"""Farm reports for farmledger

Time-bucketed summaries (sales, finance, feed, health, breeding), a herd
inventory snapshot and drill-down listings for a single bucket. Every
endpoint requires an authenticated user, accepts ``format=json|csv`` where a
summary is produced, and reports invalid parameters as ``{"message": ...}``
with status 400.

Handlers parse and validate query parameters, then delegate to the service
and details modules, which contain the actual aggregation logic."""
