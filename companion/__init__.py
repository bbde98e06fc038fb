"""Companion application: conversational memory engine and turn pipeline."""
