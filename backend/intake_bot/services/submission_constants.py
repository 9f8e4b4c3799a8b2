# /intake_bot/services/submission_constants.py

# Chat that receives a notification for every completed request.
OPERATOR_CHAT_ID = 7082303368


class RecordFormat:
    """Layout of persisted request files."""
    FILENAME = "заявка_{flow}_{chat_id}_{timestamp}.txt"
    FILENAME_TIMESTAMP = "%Y-%m-%d_%H-%M-%S"
    HEADER = "=== ЗАЯВКА ==="
    FOOTER = "=== КОНЕЦ ЗАЯВКИ ==="
    TIMESTAMP = "%Y-%m-%d %H:%M:%S"


class NotificationFormat:
    TIMESTAMP = "%d.%m.%Y %H:%M"
