# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TRACKER_APP_NAME": "App display name, also the HTTP API title (default: task-tracker).",
    "TRACKER_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Storage
    "TRACKER_DATA_DIR": "Local data directory, also holds tracker.log (default: .local/tracker).",
    "TRACKER_STORAGE_PATH": "CSV file with tasks/epics/subtasks (default: <data_dir>/tasks.csv).",
    "TRACKER_AUTOSAVE": "Rewrite the CSV after every change (true/false, default: true).",
    # Connectors
    "TRACKER_CONSOLE_ENABLED": "Enable console connector (true/false, default: true).",
    "TRACKER_HTTP_ENABLED": "Enable HTTP API (true/false, default: false).",
    "TRACKER_HTTP_HOST": "HTTP bind address (default: 127.0.0.1).",
    "TRACKER_HTTP_PORT": "HTTP port (default: 8080).",
}
