# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for everything else. Only the two switches below are read from here.
"""

# Example: run headless (reminder delivery only, no console)
# CONSOLE_ENABLED = False

# Example: never register reminders on this machine
# NOTIFICATIONS_ENABLED = False
