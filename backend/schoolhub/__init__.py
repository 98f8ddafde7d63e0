"""School management backend over Cassandra."""

__version__ = "1.0.0"
