"""Activity audit trail and realtime notification pipeline for the tour marketplace."""
