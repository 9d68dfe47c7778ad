from prometheus_client import Counter, Histogram

# HTTP request metrics
HTTP_REQUESTS_TOTAL = Counter(
    "practice_coach_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status_class"],
)
HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "practice_coach_http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["method", "path"],
)

# Live feedback tracker
FEEDBACK_UPDATES_TOTAL = Counter(
    "practice_coach_feedback_updates_total",
    "Live feedback updates applied",
    ["tracker"],
)
FEEDBACK_SUBSCRIBER_ERRORS_TOTAL = Counter(
    "practice_coach_feedback_subscriber_errors_total",
    "Live feedback subscriber callbacks that raised",
    ["tracker"],
)

# Turn analysis
TURN_ANALYSES_TOTAL = Counter(
    "practice_coach_turn_analyses_total",
    "Submitted utterances analyzed",
    ["scenario"],
)
TURN_OVERALL_SCORE = Histogram(
    "practice_coach_turn_overall_score",
    "Overall score of analyzed turns",
    buckets=(10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
)

# Counterpart replies
CHAT_REPLIES_TOTAL = Counter(
    "practice_coach_chat_replies_total",
    "Counterpart replies by source",
    ["source"],
)
CHAT_REPLY_SECONDS = Histogram(
    "practice_coach_chat_reply_seconds",
    "Time to produce a counterpart reply in seconds",
    ["provider"],
)
