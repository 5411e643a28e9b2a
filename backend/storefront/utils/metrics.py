# /storefront/utils/metrics.py

from prometheus_client import Counter, Histogram

# All Prometheus metrics used by the storefront service.

# Catalog platform
catalog_requests_counter = Counter('catalog_requests_total', 'Requests sent to the catalog platform', ['endpoint', 'status'])
category_resolution_counter = Counter('category_resolutions_total', 'Category slug resolutions', ['status'])

# Checkout
checkout_submissions_counter = Counter('checkout_submissions_total', 'Checkout submissions', ['status'])
payment_methods_counter = Counter('payment_method_loads_total', 'Payment method loads', ['status'])

# Performance Metrics
response_time_histogram = Histogram('response_time_seconds', 'Response time in seconds', ['endpoint'])
cache_operations = Counter('cache_operations_total', 'Cache operations', ['operation', 'status'])
