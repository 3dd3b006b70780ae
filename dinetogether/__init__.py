"""DineTogether restaurant recommendation service."""
