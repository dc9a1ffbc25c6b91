import os

from Constants import IMAGE_SIGNATURES, LOSSY_FORMATS, SUPPORTED_FORMATS
from Errors import FileReadError, FileWriteError


### File Operations ###
def read_file_bytes(filename):
    try:
        with open(filename, 'rb') as f:
            return f.read()
    except FileNotFoundError as e:
        raise FileReadError(filename, "file not found") from e
    except PermissionError as e:
        raise FileReadError(filename, "permission denied") from e
    except OSError as e:
        raise FileReadError(filename, str(e)) from e


def read_text_file(filename, encoding='utf-8'):
    try:
        with open(filename, 'r', encoding=encoding) as f:
            return f.read()
    except FileNotFoundError as e:
        raise FileReadError(filename, "file not found") from e
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(filename, str(e)) from e


def write_file_bytes(filename, data):
    try:
        with open(filename, 'wb') as f:
            f.write(data)
        return True
    except PermissionError as e:
        raise FileWriteError(filename, "permission denied") from e
    except OSError as e:
        raise FileWriteError(filename, str(e)) from e


def get_file_size(filename):
    try:
        return os.path.getsize(filename)
    except OSError:
        return 0


def ensure_output_directory(output_path):
    """Create the parent directory of output_path if needed; returns True if created"""
    output_dir = os.path.dirname(output_path)
    if not output_dir or os.path.isdir(output_dir):
        return False
    try:
        os.makedirs(output_dir)
    except OSError as e:
        raise FileWriteError(output_path, "cannot create output directory") from e
    return True


### Binary/Integer Conversions ###
def bytes_to_int(byte_array, start, length, endian='little', signed=False):
    if start + length > len(byte_array):
        raise ValueError("Requested beyond array length")

    result = 0

    if endian == 'little':
        for i in range(length):
            result |= byte_array[start + i] << (i * 8)
    else:
        for i in range(length):
            result = (result << 8) | byte_array[start + i]

    if signed and result & (1 << (length * 8 - 1)):
        result -= 1 << (length * 8)

    return result


def int_to_bytes(value, length, endian='little', signed=False):
    bits = length * 8

    if signed:
        if not -(1 << (bits - 1)) <= value < (1 << (bits - 1)):
            raise ValueError(f"Value {value} does not fit in {length} signed bytes")
        value &= (1 << bits) - 1
    elif value < 0:
        raise ValueError("cannot convert negative integer to bytes")

    max_value = (1 << bits) - 1

    if value > max_value:
        raise ValueError(f"Value {value} too large for {length} bytes")

    result = bytearray()

    if endian == 'little':
        for i in range(length):
            result.append((value >> (i * 8)) & 0xFF)
    else:
        for i in range(length - 1, -1, -1):
            result.append((value >> (i * 8)) & 0xFF)
    return bytes(result)


### Format Detection ###
def detect_image_format(file_bytes):
    """
    Detect format from file header
    Returns: (format_name, is_supported, warning_message)
    """
    for format_name, signature in IMAGE_SIGNATURES.items():
        if file_bytes[:len(signature)] == signature:
            is_supported = format_name in SUPPORTED_FORMATS
            warning = ""

            if format_name in LOSSY_FORMATS:
                warning = f"{format_name} does not preserve exact pixel values"
            elif not is_supported:
                warning = f"{format_name} is not currently supported"

            return (format_name, is_supported, warning)

    return ('UNKNOWN', False, "Unrecognized image format")


### Capacity Calculations ###
def calculate_capacity_percentage(required, available):
    if available == 0:
        return 100.0
    percentage = (required / available) * 100.0
    return min(100.0, percentage)
