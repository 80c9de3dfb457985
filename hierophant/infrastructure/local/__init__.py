"""Local (SQLite + direct HTTPS) infrastructure implementations."""
