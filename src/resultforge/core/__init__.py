"""Core building blocks shared across resultforge."""
