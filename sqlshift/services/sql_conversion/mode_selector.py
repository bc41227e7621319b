from .models import ConversionMode

STREAMING_THRESHOLD_BYTES = 50 * 1024 * 1024


def select_mode(byte_size: int, threshold: int = STREAMING_THRESHOLD_BYTES) -> ConversionMode:
    """Pick the conversion strategy from the input size alone.

    Inputs strictly larger than *threshold* are streamed line by line.
    """
    if byte_size > threshold:
        return ConversionMode.STREAMING
    return ConversionMode.BUFFERED
