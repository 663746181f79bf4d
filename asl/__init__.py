"""General-purpose utilities: SHA-1, paths, factories, a tiny test registry, 4x4 matrices, processes, logging, INI files, sockets, serial ports and shared memory."""

__version__ = "1.0.0"