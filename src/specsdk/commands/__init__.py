"""Built-in CLI commands for specsdk (``generate`` and ``inspect``)."""
