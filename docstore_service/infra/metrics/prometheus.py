"""Prometheus metrics for monitoring."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

# Custom registry keeps application metrics separate from process defaults
REGISTRY = CollectorRegistry()

# Covers response times from 1ms to 10s
DEFAULT_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
)

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

errors_total = Counter(
    "errors_total",
    "Total application errors rendered as problem details",
    ["code", "status_code"],
    registry=REGISTRY,
)

# Event feed metrics
events_appended_total = Counter(
    "events_appended_total",
    "Total events appended to tenant buffers",
    ["source"],
    registry=REGISTRY,
)

events_rejected_total = Counter(
    "events_rejected_total",
    "Total event submissions rejected by ingest validation",
    ["code"],
    registry=REGISTRY,
)

event_buffers_active = Gauge(
    "event_buffers_active",
    "Number of tenant event buffers currently allocated",
    registry=REGISTRY,
)

# WebSocket metrics
websocket_connections_total = Gauge(
    "websocket_connections_total",
    "Current number of active WebSocket connections",
    registry=REGISTRY,
)

websocket_auth_rejections_total = Counter(
    "websocket_auth_rejections_total",
    "Total WebSocket connection attempts rejected during authentication",
    ["code"],
    registry=REGISTRY,
)

websocket_messages_received_total = Counter(
    "websocket_messages_received_total",
    "Total number of WebSocket messages received from clients",
    ["message_type"],
    registry=REGISTRY,
)

websocket_messages_sent_total = Counter(
    "websocket_messages_sent_total",
    "Total number of WebSocket messages sent to clients",
    ["message_type"],
    registry=REGISTRY,
)

websocket_slow_consumers_dropped_total = Counter(
    "websocket_slow_consumers_dropped_total",
    "Connections dropped because their outbound queue was full",
    registry=REGISTRY,
)

websocket_connection_duration_seconds = Histogram(
    "websocket_connection_duration_seconds",
    "Duration of WebSocket connections in seconds",
    buckets=(1, 5, 10, 30, 60, 120, 300, 600, 1800, 3600),
    registry=REGISTRY,
)

websocket_broadcast_recipients = Histogram(
    "websocket_broadcast_recipients",
    "Number of recipients per broadcast message",
    buckets=(0, 1, 5, 10, 25, 50, 100, 250, 500, 1000),
    registry=REGISTRY,
)
