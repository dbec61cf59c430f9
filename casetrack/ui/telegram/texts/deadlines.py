USAGE_TASK = "Usage: /task <task_id>"
USAGE_PAUSE = "Usage: /pause <task_id> <reason>"
USAGE_RESUME = "Usage: /resume <task_id> [status]"
USAGE_APPLY = "Usage: /apply <task_id> <action_type_id> [YYYY-MM-DD]"
USAGE_HISTORY = "Usage: /history <task_id>"

MANUAL_PAUSE_REASON = "manual pause"
NO_ALERTS = "No deadlines need attention."
NO_HISTORY = "No pauses recorded."
INVALID_DATE = "Invalid date, use YYYY-MM-DD."
INVALID_STATUS = "Unknown status."
