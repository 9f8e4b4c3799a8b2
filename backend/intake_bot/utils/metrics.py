# /intake_bot/utils/metrics.py

from prometheus_client import Counter, Histogram, Gauge

# This file defines all Prometheus metrics used for application monitoring.
# Centralizing them here makes them easy to find and manage.

# Dialog Metrics
message_counter = Counter('intake_messages_total', 'Inbound messages processed', ['transition'])
active_conversations_gauge = Gauge('intake_active_conversations', 'Chats with an unfinished flow in memory')
submission_counter = Counter('intake_submissions_total', 'Submission sink operations', ['stage', 'status'])

# Transport Metrics
telegram_requests_counter = Counter('telegram_requests_total', 'Telegram Bot API requests', ['method', 'status'])

# Performance Metrics
response_time_histogram = Histogram('response_time_seconds', 'Response time in seconds', ['endpoint'])
