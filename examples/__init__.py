"""Runnable scripts for the ambient occlusion benchmark."""
