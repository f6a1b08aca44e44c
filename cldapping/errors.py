class CldapError(Exception):
    pass

class EncodingError(CldapError):
    pass

class DecodeError(CldapError):
    pass

class EnvelopeDecodeError(DecodeError):
    pass

class TruncatedStructureError(DecodeError):
    def __init__(self, name, expected, actual):
        super().__init__(f"{name} needs {expected} bytes, got {actual}")
        self.name = name
        self.expected = expected
        self.actual = actual

class NameDecompressionError(DecodeError):
    pass

class InsufficientNamesError(DecodeError):
    def __init__(self, count, expected=8):
        super().__init__(f"CLDAP ping response contained {count} RFC 1035 encoded strings instead of expected {expected}")
        self.count = count
        self.expected = expected

class UnexpectedFooterError(DecodeError):
    def __init__(self, ntVersion, lmNtToken, lm20Token):
        super().__init__(f"CLDAP ping response contained unexpected final values 0x{ntVersion:x}, 0x{lmNtToken:x}, 0x{lm20Token:x}")
        self.ntVersion = ntVersion
        self.lmNtToken = lmNtToken
        self.lm20Token = lm20Token

# raised by the UDP transport only, never by the codec
class TransportError(CldapError):
    pass
