"""Content handling: discovery, document rendering, navigation, watching, routing."""
