__all__ = ["EXAMPLE_URL", "EXAMPLE_FILE_LENGTH", "EXAMPLE_BYTES"]

EXAMPLE_URL = "https://example.com/media/example_song.mp3"
EXAMPLE_FILE_LENGTH = 5000
# Deterministic, non-repeating within a chunk so misplaced bytes are detected
EXAMPLE_BYTES = bytes((i * 7 + i // 256) % 256 for i in range(EXAMPLE_FILE_LENGTH))
