"""Application settings, logging and legal enumerations."""
