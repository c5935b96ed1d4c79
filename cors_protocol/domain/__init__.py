"""Request classification, options and exceptions."""
