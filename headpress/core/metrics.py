# headpress/core/metrics.py
from prometheus_client import Counter, Histogram

# Prometheus metrics exposed at /metrics
api_requests_total = Counter(
    'headpress_api_requests_total',
    'Total API requests',
    ['method', 'endpoint', 'status']
)

api_request_duration_seconds = Histogram(
    'headpress_api_request_duration_seconds',
    'API request duration in seconds',
    ['method', 'endpoint']
)

webhook_deliveries_total = Counter(
    'headpress_webhook_deliveries_total',
    'Outbound webhook deliveries',
    ['event', 'outcome']
)
