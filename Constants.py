### Image Constants ###
BMP_SIGNATURE = b'BM'  # to identify bmp files this also spells 'BM' in ASCII
BMP_HEADER_SIZE = 54  # file header (14) + BITMAPINFOHEADER (40)
BMP_INFO_HEADER_SIZE = 40
SUPPORTED_BIT_DEPTHS = [24, 32]  # RGB and RGBA

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'

IMAGE_SIGNATURES = {
    'BMP': BMP_SIGNATURE,
    'PNG': PNG_SIGNATURE,
    'JPEG': b'\xff\xd8\xff',
    'GIF': b'GIF8',
}

SUPPORTED_FORMATS = ['BMP', 'PNG']
LOSSY_FORMATS = ['JPEG', 'GIF']  # lossy or palettized, both destroy pixel deltas
FORMAT_EXTENSIONS = {'.bmp': 'BMP', '.png': 'PNG'}

CHANNELS = 4  # every carrier pixel is handled as RGBA
CHANNEL_MODULUS = 256
OPAQUE = 255

### Instruction Encoding ###
MINIMUM_PIXEL_DISTANCE = 10  # smallest delta used by the default table, keeps codes above sensor noise
DEFAULT_ORIGIN = 0  # anchor pixel index, encoded pixels start right after it

### Execution ###
TAPE_INITIAL_SIZE = 256
DEFAULT_STEP_LIMIT = None  # unbounded

UNDERFLOW_ERROR = 'error'
UNDERFLOW_CLAMP = 'clamp'
UNDERFLOW_POLICIES = (UNDERFLOW_ERROR, UNDERFLOW_CLAMP)

EOF_ZERO = 'zero'
EOF_KEEP = 'keep'
EOF_POLICIES = (EOF_ZERO, EOF_KEEP)
