"""
Preference subsystem.

Components:
- prefs_models.py: data structures (UserPreferences, SortOrder)
- prefs_store.py: SQLite-backed single-record store with atomic updates and a live stream
- legacy.py: legacy flat key-value source + one-time migration
- prefs_repository.py: typed update operations used by the rest of the app
"""
