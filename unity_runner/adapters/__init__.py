"""Adapters — bindings to the host OS and the Unity editor process."""
