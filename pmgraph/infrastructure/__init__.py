"""Infrastructure layer: file I/O around the pure graph core."""
