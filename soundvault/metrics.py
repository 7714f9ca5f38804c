"""Prometheus metrics for the SoundVault service."""
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

http_requests_total = Counter(
    'soundvault_http_requests_total',
    'Total HTTP requests handled',
    ['method', 'endpoint', 'status']
)

# Ingestion metrics
tracks_ingested_total = Counter(
    'soundvault_tracks_ingested_total',
    'Total number of tracks created',
    ['visibility']  # 'personal', 'global'
)

tracks_deleted_total = Counter(
    'soundvault_tracks_deleted_total',
    'Total number of tracks deleted',
    ['visibility']
)

blob_uploads_total = Counter(
    'soundvault_blob_uploads_total',
    'Total number of blobs stored',
    ['namespace']  # 'songs', 'images'
)

# Streaming metrics
streaming_connections_active = Gauge(
    'soundvault_streaming_connections_active',
    'Number of active streaming connections',
    ['namespace']
)

streaming_bytes_sent_total = Counter(
    'soundvault_streaming_bytes_sent_total',
    'Total bytes sent for streaming',
    ['namespace']
)

playback_started_total = Counter(
    'soundvault_playback_started_total',
    'Total number of audio streams started'
)

# Search metrics
search_queries_total = Counter(
    'soundvault_search_queries_total',
    'Total number of search queries',
    ['has_text', 'has_genre']
)

search_duration_seconds = Histogram(
    'soundvault_search_duration_seconds',
    'Time spent processing search queries',
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0)
)


def get_metrics() -> bytes:
    """Render all registered metrics in the Prometheus text format."""
    return generate_latest()


METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST
