"""Sample evidence payloads shared by tests."""

import base64

SAMPLE_IMAGE = b"\xff\xd8\xff\xe0 mangrove evidence frame"
SAMPLE_IMAGE_BASE64 = base64.b64encode(SAMPLE_IMAGE).decode("ascii")
