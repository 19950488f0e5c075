"""Top-level commands; each module is discovered by the dispatcher."""
