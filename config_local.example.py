# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Only the switches below are read; everything else comes from env / .env.
"""

# Example: run the HTTP API next to the console
# HTTP_ENABLED = True
# HTTP_PORT = 8081

# Example: headless server (HTTP only)
# CONSOLE_ENABLED = False
