"""capprobe: capability probing and caching for external CLI tools."""
