"""Local SQLite signal store."""
