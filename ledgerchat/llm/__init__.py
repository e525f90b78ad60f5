"""Completion endpoint abstraction, vendor adapters and the chat loop."""
