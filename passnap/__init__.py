"""passnap: one-way snapshot of a LastPass vault into a local password store."""

__version__ = "0.1.0"
