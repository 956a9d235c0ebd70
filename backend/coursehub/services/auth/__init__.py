"""Session protocol: login, refresh rotation and logout."""
