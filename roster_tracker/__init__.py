"""Leaderboard tracking for a fixed roster of competitive Fortnite players."""
