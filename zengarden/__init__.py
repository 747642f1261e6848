"""Zen garden: a sand-raking drawing toy with a share backend."""
