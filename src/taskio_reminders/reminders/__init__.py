"""
Reminder subsystem.

Components:
- models.py: data structures (Task, User, ReminderCandidate, PassReport)
- policy.py: thresholds + days-overdue / cooldown arithmetic
- selector.py: which (task, owner) pairs get a reminder this tick
- dispatcher.py: sends them one by one and records successful sends
- driver.py: hourly timer, startup pass, manual trigger
- store.py: SQLite-backed task/user storage
- alerts.py: reminder opt-in toggling
"""
